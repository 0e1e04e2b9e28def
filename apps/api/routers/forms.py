import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import get_accounts, get_applications
from domain.models import Application, ApplicationCreate, ApplicationStatus, FormTarget
from services.access.gate import display_name_of
from services.backup.csv_codec import normalize_birthday
from services.persistence.mongo import AccountRepository, ApplicationRepository, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_target(owner_id: str, accounts: AccountRepository) -> FormTarget:
    # unknown owners still get a form; their id doubles as the display name
    account = accounts.find_by_name(owner_id)
    name = display_name_of(account) if account else owner_id
    return FormTarget(ownerId=owner_id, ownerName=name)


@router.get("/{owner_id}", response_model=FormTarget)
def form_target(owner_id: str, accounts: AccountRepository = Depends(get_accounts)):  # noqa: B008
    try:
        return resolve_target(owner_id, accounts)
    except StoreError as e:
        logger.exception("form target lookup failed")
        raise HTTPException(500, f"db error: {e}") from e


@router.post("/{owner_id}", response_model=Application, status_code=status.HTTP_201_CREATED)
def submit_application(
    owner_id: str,
    payload: ApplicationCreate,
    accounts: AccountRepository = Depends(get_accounts),  # noqa: B008
    repo: ApplicationRepository = Depends(get_applications),  # noqa: B008
):
    """Public vendor submission, filed under ``owner_id``."""
    try:
        target = resolve_target(owner_id, accounts)
        doc = payload.model_dump()
        for worker in doc["workers"]:
            worker["birthday"] = normalize_birthday(worker["birthday"])
        doc.update(
            {
                "createdAt": iso_now(),
                "ownerId": target.ownerId,
                "ownerName": target.ownerName,
                "status": ApplicationStatus.PENDING.value,
            }
        )
        app_id = repo.insert(doc)
    except StoreError as e:
        logger.exception("submission failed for owner %s", owner_id)
        raise HTTPException(500, f"db error: {e}") from e

    logger.info("application %s submitted for %s", app_id, owner_id)
    return Application(id=app_id, **doc)
