# apps/api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from apps.api.routers import accounts, applications, auth, excel, forms
from core.config import settings
from core.logging import configure_logging
from services.access.gate import ensure_super_admin
from services.persistence.mongo import AccountRepository, StoreError, ensure_indexes, get_mongo

logger = logging.getLogger(__name__)


def bootstrap_store() -> None:
    """Indexes and the super-admin account; the API still starts if Mongo is down."""
    try:
        db = get_mongo()
        ensure_indexes(db)
        ensure_super_admin(AccountRepository(db))
    except (PyMongoError, StoreError):
        logger.exception("store bootstrap failed; continuing without it")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    bootstrap_store()
    yield


app = FastAPI(title="Vendor Safety Registration API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(forms.router)
app.include_router(applications.router)
app.include_router(accounts.router)
app.include_router(excel.router)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
