from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

BOM = "\ufeff"
FULLWIDTH_COMMA = "，"

HEADER = [
    "BackupID(勿改)",
    "申請人",
    "電話",
    "供應商",
    "負責人",
    "聯絡人",
    "填表時間",
    "員工姓名",
    "員工身分證",
    "血型",
    "生日",
    "所屬管理者",
]

# positions consumed on import; the trailing owner column is informational only
IMPORT_COLUMNS = (
    "backupId",
    "applicant",
    "phone",
    "vendor_name",
    "vendor_rep",
    "contact_person",
    "createdAt",
    "worker_name",
    "worker_idNumber",
    "worker_bloodType",
    "worker_birthday",
)

_PHONE_JUNK = re.compile(r"['=\"]")


def _clean(val: Any) -> str:
    return str(val).replace(",", FULLWIDTH_COMMA) if val else ""


def _phone_cell(phone: Any) -> str:
    # keeps spreadsheets from eating leading zeros
    return f"'=\"{phone}\"" if phone else ""


def normalize_birthday(value: str | None) -> str:
    return (value or "").replace("-", "/")


def export_backup(applications: Iterable[Mapping[str, Any]]) -> str:
    """Serialize applications (already ordered) into the backup CSV text, BOM included."""
    rows: list[str] = []
    for app in applications:
        head = [
            str(app.get("id") or ""),
            _clean(app.get("applicant")),
            _phone_cell(app.get("phone")),
            _clean(app.get("vendor_name")),
            _clean(app.get("vendor_rep")),
            _clean(app.get("contact_person")),
            str(app.get("createdAt") or ""),
        ]
        owner = _clean(app.get("ownerId"))
        workers = app.get("workers") or []
        if not workers:
            rows.append(",".join(head + ["", "", "", "", owner]))
            continue
        for w in workers:
            tail = [
                _clean(w.get("name")),
                _clean(w.get("idNumber")),
                _clean(w.get("bloodType")),
                _clean(w.get("birthday")),
            ]
            rows.append(",".join(head + tail + [owner]))

    return BOM + ",".join(HEADER) + "\n" + "\n".join(rows)


def backup_filename(scope: str, today: date | None = None) -> str:
    return f"Backup_{scope}_{(today or date.today()).isoformat()}.csv"


@dataclass(frozen=True)
class BackupRow:
    backupId: str
    applicant: str
    phone: str
    vendor_name: str
    vendor_rep: str
    contact_person: str
    createdAt: str
    worker_name: str
    worker_idNumber: str
    worker_bloodType: str
    worker_birthday: str

    @classmethod
    def from_columns(cls, cols: Sequence[str]) -> BackupRow | None:
        """Build a row from split columns; ``None`` means the line is skipped."""
        padded = list(cols[: len(IMPORT_COLUMNS)])
        padded += [""] * (len(IMPORT_COLUMNS) - len(padded))
        values = dict(zip(IMPORT_COLUMNS, padded))
        if not values["backupId"] or not values["applicant"]:
            return None

        values = {k: v.strip() for k, v in values.items()}
        values["phone"] = _PHONE_JUNK.sub("", values["phone"]).strip()
        values["worker_birthday"] = normalize_birthday(values["worker_birthday"])
        return cls(**values)

    def application_fields(self) -> dict[str, Any]:
        return {
            "applicant": self.applicant,
            "phone": self.phone,
            "vendor_name": self.vendor_name,
            "vendor_rep": self.vendor_rep,
            "contact_person": self.contact_person,
            "createdAt": self.createdAt,
            "workers": [],
        }

    def worker(self) -> dict[str, str] | None:
        if not self.worker_name:
            return None
        return {
            "name": self.worker_name,
            "idNumber": self.worker_idNumber,
            "bloodType": self.worker_bloodType,
            "birthday": self.worker_birthday,
        }


def split_line(line: str) -> list[str]:
    return line.split("\t") if "\t" in line else line.split(",")


def parse_backup(text: str) -> list[dict[str, Any]]:
    """
    Parse backup CSV/TSV text into grouped application records.

    The first line is the header. Rows sharing a backup id collapse into one
    application whose workers keep row order. Ids are not carried over.
    """
    grouped: dict[str, dict[str, Any]] = {}
    skipped = 0
    for raw in text.split("\n")[1:]:
        line = raw.strip()
        if not line:
            continue
        row = BackupRow.from_columns(split_line(line))
        if row is None:
            skipped += 1
            continue
        app = grouped.setdefault(row.backupId, row.application_fields())
        worker = row.worker()
        if worker:
            app["workers"].append(worker)

    if skipped:
        logger.debug("skipped %d backup rows without id or applicant", skipped)
    logger.info("parsed %d applications from backup", len(grouped))
    return list(grouped.values())
