"""Probe and metrics endpoints.

/metrics serves the Prometheus registry, /health reports the document
registry and the blob store, /ready only needs the registry to answer.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..database import get_db
from ..dependencies import get_blob_store
from ..domain.documents.ports.blob_store_port import BlobStorePort
from .health import (
    HealthStatus,
    check_blob_store_health,
    check_database_health,
    health_report,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Registry and object storage health")
async def health_check(
    db: Annotated[Session, Depends(get_db)],
    blob_store: Annotated[BlobStorePort, Depends(get_blob_store)],
):
    """200 when every component is healthy, 503 otherwise."""
    status_code, body = health_report({
        "database": await run_in_threadpool(check_database_health, db),
        "object_storage": await check_blob_store_health(blob_store),
    })
    return JSONResponse(content=body, status_code=status_code)


@router.get("/ready", summary="Readiness probe")
def readiness_check(db: Annotated[Session, Depends(get_db)]):
    db_health = check_database_health(db)
    if db_health.status != HealthStatus.HEALTHY:
        return JSONResponse(
            content={"status": "not_ready", "message": db_health.message},
            status_code=503,
        )
    return {"status": "ready", "message": "Document registry reachable"}
