from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from apps.api.deps import get_settings
from domain.models import ExcelExportRequest
from services.export.excel_template import (
    XLSX_MIME,
    TemplateMissingError,
    content_disposition,
    export_filename,
    fill_template,
)
from services.observability.metrics import timing_metric

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["excel"])

FAILED = {"error": "Failed to generate excel"}


@router.post(
    "/export-excel",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ExcelExportRequest.model_json_schema()}},
            "required": True,
        }
    },
)
async def export_excel(request: Request, settings=Depends(get_settings)):  # noqa: B008
    """
    Fill the safety-certification template for one application.

    Every failure, a malformed body included, answers 500 with an
    ``error`` body.
    """
    try:
        payload = ExcelExportRequest.model_validate_json(await request.body())
    except ValidationError as e:
        logger.error("unusable excel export body: %s", e)
        return JSONResponse(FAILED, status_code=500)

    try:
        with timing_metric("excel: total"):
            data = await run_in_threadpool(
                fill_template, Path(settings.EXCEL_TEMPLATE_PATH), payload
            )
    except TemplateMissingError:
        logger.error("excel template missing at %s", settings.EXCEL_TEMPLATE_PATH)
        return JSONResponse({"error": "Template file not found"}, status_code=500)
    except Exception:  # noqa: BLE001
        logger.exception("excel export failed")
        return JSONResponse(FAILED, status_code=500)

    filename = export_filename(payload.applicantName)
    logger.info("sending %s", filename)
    return Response(
        content=data,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": content_disposition(filename)},
    )
