from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from domain.value_objects import ImportOutcome, VerifiedScope

logger = logging.getLogger(__name__)


def stamp_owner(record: dict[str, Any], owner: VerifiedScope | None) -> dict[str, Any]:
    """Copy of ``record`` carrying the importing tenant, if any."""
    out = dict(record)
    if owner is not None:
        out["ownerId"] = owner.tenant
        out["ownerName"] = owner.display_name
    return out


def restore_applications(
    records: Sequence[dict[str, Any]],
    insert: Callable[[dict[str, Any]], str],
    max_workers: int = 4,
    owner: VerifiedScope | None = None,
) -> ImportOutcome:
    """
    Write every record as a new document through ``insert``.

    Writes run in a bounded pool; each one succeeds or fails on its own and
    nothing is rolled back. Re-running the same records duplicates them.
    """
    outcome = ImportOutcome()
    if not records:
        return outcome

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {
            pool.submit(insert, stamp_owner(rec, owner)): idx for idx, rec in enumerate(records)
        }
        for fut in as_completed(futures):
            idx = futures[fut]
            try:
                new_id = fut.result()
            except Exception as e:  # noqa: BLE001
                logger.exception("restore write %d failed", idx)
                outcome.failed += 1
                outcome.errors.append(f"record {idx}: {e}")
                continue
            outcome.succeeded += 1
            outcome.inserted_ids.append(new_id)

    logger.info("restore finished: %s", outcome.summary())
    return outcome
