import logging
from typing import List, Literal, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Response,
    UploadFile,
    status,
)

from apps.api.deps import (
    get_accounts,
    get_applications,
    get_scope,
    get_settings,
    require_confirmation,
)
from apps.api.routers.forms import resolve_target
from domain.models import Application, ImportReport
from domain.value_objects import SortState, VerifiedScope
from services.backup.csv_codec import backup_filename, export_backup, parse_backup
from services.backup.restore import restore_applications
from services.export.excel_template import content_disposition
from services.listing.sort_engine import SORTABLE_KEYS, sort_applications
from services.persistence.mongo import AccountRepository, ApplicationRepository, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


def sort_state(
    sort: str = Query("createdAt"),
    direction: Literal["asc", "desc"] = Query("desc"),
) -> SortState:
    if sort not in SORTABLE_KEYS:
        raise HTTPException(400, f"cannot sort by {sort!r}")
    return SortState(key=sort, direction=direction)


def scoped_applications(repo: ApplicationRepository, scope: VerifiedScope) -> list[dict]:
    owner = None if scope.is_super_admin else scope.tenant
    try:
        return repo.list(owner_id=owner)
    except StoreError as e:
        logger.exception("listing applications failed for %s", scope.tenant)
        raise HTTPException(500, f"db error: {e}") from e


@router.get("/", response_model=List[Application])
def list_applications(
    scope: VerifiedScope = Depends(get_scope),  # noqa: B008
    state: SortState = Depends(sort_state),  # noqa: B008
    repo: ApplicationRepository = Depends(get_applications),  # noqa: B008
):
    return sort_applications(scoped_applications(repo, scope), state)


@router.get("/export")
def export_csv(
    scope: VerifiedScope = Depends(get_scope),  # noqa: B008
    state: SortState = Depends(sort_state),  # noqa: B008
    repo: ApplicationRepository = Depends(get_applications),  # noqa: B008
):
    apps = sort_applications(scoped_applications(repo, scope), state)
    body = export_backup(apps)
    filename = backup_filename(scope.tenant)
    logger.info("exported %d applications for %s", len(apps), scope.tenant)
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.post("/import", response_model=ImportReport)
def import_csv(
    scope: VerifiedScope = Depends(get_scope),  # noqa: B008
    _: None = Depends(require_confirmation),  # noqa: B008
    file: UploadFile = File(...),  # noqa: B008
    owner: Optional[str] = Form(None),  # noqa: B008
    repo: ApplicationRepository = Depends(get_applications),  # noqa: B008
    accounts: AccountRepository = Depends(get_accounts),  # noqa: B008
    settings=Depends(get_settings),  # noqa: B008
):
    """
    Restore a CSV backup as new documents.

    Tenants always import into their own scope. The super-admin keeps the
    records unowned unless ``owner`` names a tenant.
    """
    raw = file.file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(400, "file is not valid UTF-8 text") from e

    records = parse_backup(text)
    target = scope
    if scope.is_super_admin:
        target = None
        if owner:
            try:
                named = resolve_target(owner, accounts)
            except StoreError as e:
                logger.exception("owner lookup failed for import")
                raise HTTPException(500, f"db error: {e}") from e
            target = VerifiedScope(tenant=named.ownerId, display_name=named.ownerName)

    outcome = restore_applications(
        records, repo.insert, max_workers=settings.IMPORT_CONCURRENCY, owner=target
    )
    return ImportReport(
        groups=len(records),
        succeeded=outcome.succeeded,
        failed=outcome.failed,
        inserted_ids=outcome.inserted_ids,
        errors=outcome.errors,
        message=outcome.summary(),
    )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: str,
    scope: VerifiedScope = Depends(get_scope),  # noqa: B008
    _: None = Depends(require_confirmation),  # noqa: B008
    repo: ApplicationRepository = Depends(get_applications),  # noqa: B008
):
    try:
        app = repo.get(application_id)
        if app is None or not (scope.is_super_admin or app.get("ownerId") == scope.tenant):
            raise HTTPException(404, "Application not found")
        repo.delete(application_id)
    except StoreError as e:
        logger.exception("delete failed for %s", application_id)
        raise HTTPException(500, f"db error: {e}") from e

    logger.info("application %s deleted by %s", application_id, scope.tenant)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
