"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from awaitguard import __version__
from awaitguard.api.dependencies import get_file_cache
from awaitguard.cache.file_cache import FileCache
from awaitguard.core.rule_engine import RULE_REGISTRY

router = APIRouter()


@router.get("/health")
async def health(cache: FileCache = Depends(get_file_cache)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "rules": list(RULE_REGISTRY),
        "cache": cache.stats(),
    }
