"""
Health Check Router
Liveness and data store reachability
"""
import logging

from fastapi import APIRouter

from spendwise.core.config import settings
from spendwise.db import dynamo
from spendwise.utils.dates import utcnow_iso

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": utcnow_iso(),
    }


@router.get("/status")
def data_store_status():
    """Check that both DynamoDB tables answer."""
    tables = dynamo.table_status()
    connected = all(table["status"] == "accessible" for table in tables.values())
    return {
        "timestamp": utcnow_iso(),
        "services": {
            "dynamodb": {
                "connected": connected,
                "region": settings.DYNAMO_REGION,
                "tables": tables,
            }
        },
        "overall_status": "healthy" if connected else "degraded",
    }
