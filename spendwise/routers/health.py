"""
Health Check Router
Simple health check endpoints
"""
from fastapi import APIRouter
import logging

from spendwise.core.config import settings
from spendwise.core.responses import success_response
from spendwise.db.dynamo import get_table, table_names
from spendwise.utils.scheduler import get_scheduler_status
from spendwise.utils.timeutils import to_iso, utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return success_response({
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": to_iso(utcnow()),
    })


@router.get("/status")
def services_status():
    """
    Check that every DynamoDB table is reachable and report the reaper job.
    """
    tables = {}
    for kind, name in table_names().items():
        try:
            get_table(kind).table.scan(Limit=1)
            tables[kind] = {"name": name, "status": "accessible", "region": settings.DYNAMO_REGION}
        except Exception as e:
            logger.error(f"DynamoDB check failed for {name}: {str(e)}")
            tables[kind] = {"name": name, "status": "error", "error": str(e)}

    return success_response({
        "timestamp": to_iso(utcnow()),
        "services": {
            "dynamodb": {
                "connected": all(t["status"] == "accessible" for t in tables.values()),
                "tables": tables,
            },
            "scheduler": get_scheduler_status(),
        },
    })
