"""Health check utilities for DealDocs.

Two components back every request: the document registry (database) and the
blob store. Each check is timed and never raises; failures are reported as an
UNHEALTHY component so /health can answer 503 with details.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from ..domain.documents.ports.blob_store_port import BlobStorePort
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _unhealthy(component: str, label: str, error: Exception) -> ComponentHealth:
    logger.error(f"{component} health check failed: {error}", exc_info=error)
    return ComponentHealth(status=HealthStatus.UNHEALTHY, message=f"{label} error: {error}")


def check_database_health(db: Session) -> ComponentHealth:
    """Run SELECT 1 against the document registry."""
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        return _unhealthy("Database", "Database", e)

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
        latency_ms=_elapsed_ms(start),
    )


async def check_blob_store_health(blob_store: BlobStorePort) -> ComponentHealth:
    """Ask the blob store to verify its bucket."""
    start = time.perf_counter()
    try:
        await blob_store.check_health()
    except Exception as e:
        return _unhealthy("Object storage", "Object storage", e)

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Object storage OK",
        latency_ms=_elapsed_ms(start),
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Unhealthy if any component is unhealthy."""
    if any(comp.status == HealthStatus.UNHEALTHY for comp in components.values()):
        return HealthStatus.UNHEALTHY
    return HealthStatus.HEALTHY


def health_report(components: Dict[str, ComponentHealth]) -> Tuple[int, dict]:
    """Build the /health status code and body for a set of component results."""
    overall = get_overall_health(components)
    body = {
        "status": overall.value,
        "components": {
            name: {"status": comp.status.value, "message": comp.message, "latency_ms": comp.latency_ms}
            for name, comp in components.items()
        },
    }
    return (503 if overall == HealthStatus.UNHEALTHY else 200), body
