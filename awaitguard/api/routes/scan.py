"""
Scan Route — POST /scan

Accepts {"files": [{"path", "content"}]}, runs every registered rule over
the supported files, and returns the issues in file then emission order.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from awaitguard.api.dependencies import get_audit_logger, get_scan_worker
from awaitguard.audit.logger import AuditLogger
from awaitguard.config import settings
from awaitguard.models.scan_models import ScanRequest, ScanResponse
from awaitguard.workers.scan_worker import ScanWorker

logger = logging.getLogger("awaitguard.api.scan")

router = APIRouter()


@router.post("/scan", response_model=ScanResponse)
async def scan(
    request: ScanRequest,
    worker: ScanWorker = Depends(get_scan_worker),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Scan submitted files for un-awaited async calls."""
    if not request.files:
        return ScanResponse(message="error", error="No files submitted")

    for f in request.files:
        if len(f.content.encode("utf-8")) > settings.max_file_size_bytes:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"File '{f.path}' exceeds maximum size of "
                    f"{settings.max_file_size_bytes} bytes"
                ),
            )

    try:
        # Parsing is CPU-bound; keep it off the event loop
        response = await asyncio.to_thread(worker.run_scan, request.files)
    except Exception:
        logger.exception("Unexpected scan error")
        return ScanResponse(message="error", error="Scan failed safely.")

    if response.report and response.report.audit:
        audit.log(response.report.audit)

    return response
