from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

from domain.models import AccountRole

Direction = Literal["asc", "desc"]

SUPER_ADMIN_ROLE = AccountRole.SUPER_ADMIN.value


@dataclass(frozen=True)
class VerifiedScope:
    """Proof of a successful login, handed to every privileged operation."""

    tenant: str
    display_name: str
    role: str = "tenant"

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN_ROLE


@dataclass(frozen=True)
class SortState:
    key: str = "createdAt"
    direction: Direction = "desc"

    def toggle(self, key: str) -> SortState:
        if key == self.key and self.direction == "asc":
            return replace(self, direction="desc")
        return SortState(key=key, direction="asc")


@dataclass
class ImportOutcome:
    succeeded: int = 0
    failed: int = 0
    inserted_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def summary(self) -> str:
        return f"{self.succeeded} succeeded, {self.failed} failed"
