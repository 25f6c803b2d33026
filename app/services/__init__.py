"""
app/services package marker.
"""

from app.services.ingestion_orchestrator_service import (
    AcceptedJob,
    IngestionOrchestratorService,
    ThreadPoolJobExecutor,
    get_ingestion_orchestrator_service,
)

__all__ = [
    "AcceptedJob",
    "IngestionOrchestratorService",
    "ThreadPoolJobExecutor",
    "get_ingestion_orchestrator_service",
]
