from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApplicationStatus(str, Enum):
    PENDING = "pending"


class AccountRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    TENANT = "tenant"


class Worker(BaseModel):
    name: str = ""
    idNumber: str = ""
    bloodType: str = ""
    birthday: str = ""


class ApplicationCreate(BaseModel):
    """Public submission form body."""

    applicant: str = ""
    phone: str = ""
    vendor_name: str = ""
    vendor_rep: str = ""
    contact_person: str = ""
    workers: List[Worker] = []


class Application(ApplicationCreate):
    model_config = ConfigDict(extra="ignore")

    id: str
    createdAt: str = ""
    ownerId: Optional[str] = None
    ownerName: Optional[str] = None
    status: str = ApplicationStatus.PENDING.value


class FormTarget(BaseModel):
    ownerId: str
    ownerName: str


class AccountCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    display_name: Optional[str] = None
    role: AccountRole = AccountRole.TENANT


class Account(BaseModel):
    """Account as listed to the super-admin; the code never leaves the store."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    display_name: str = ""
    role: str = AccountRole.TENANT.value


class LoginRequest(BaseModel):
    tenant: str
    password: str = ""


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    tenant: str
    display_name: str
    role: str


class ImportReport(BaseModel):
    groups: int
    succeeded: int
    failed: int
    inserted_ids: List[str] = []
    errors: List[str] = []
    message: str


def _as_text(v):
    if v is None or isinstance(v, str):
        return v
    return str(v)


class ExcelWorker(BaseModel):
    name: Optional[str] = ""
    idNumber: Optional[str] = ""
    bloodType: Optional[str] = ""
    birthday: Optional[str] = ""

    @field_validator("name", "idNumber", "bloodType", "birthday", mode="before")
    @classmethod
    def stringify(cls, v):
        return _as_text(v)


class ExcelExportRequest(BaseModel):
    """Body of the template export; numbers typed into the form arrive unquoted."""

    applicantName: Optional[str] = ""
    vendorName: Optional[str] = ""
    vendorRep: Optional[str] = ""
    contactPerson: Optional[str] = ""
    phone: Optional[str] = ""
    workers: List[ExcelWorker] = []

    @field_validator("applicantName", "vendorName", "vendorRep", "contactPerson", "phone", mode="before")
    @classmethod
    def stringify(cls, v):
        return _as_text(v)
