from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-change-me")
    ACCESS_TOKEN_EXPIRE_MIN: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MIN", "60"))

    MONGO_URL: str = os.getenv("MONGO_URL", "mongodb://mongo:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "safety")

    EXCEL_TEMPLATE_PATH: str = os.getenv("EXCEL_TEMPLATE_PATH", "public/template.xlsx")
    IMPORT_CONCURRENCY: int = int(os.getenv("IMPORT_CONCURRENCY", "4"))

    SUPER_ADMIN_NAME: str = os.getenv("SUPER_ADMIN_NAME", "admin")
    # bootstrap only; ignored once the account exists
    SUPER_ADMIN_CODE: str | None = os.getenv("SUPER_ADMIN_CODE")

    API_URL: str = os.getenv("API_URL", "http://localhost:8000")
    CORS_ALLOW_ORIGINS: list[str] = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:8501").split(
        ","
    )


settings = Settings()
