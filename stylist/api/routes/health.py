"""Health check endpoint."""
from fastapi import APIRouter, Depends
from typing import Dict, Any
import time

from stylist.agent.registry import AgentRegistry
from stylist.api.dependencies import get_registry, get_repository
from stylist.database.repository import StoreRepository
from stylist.utils.config import settings
from stylist.utils.errors import StoreError

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check(
    repository: StoreRepository = Depends(get_repository),
    registry: AgentRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Store connectivity and catalog presence."""
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "checks": {},
    }

    try:
        products = await repository.list_products()
        if products:
            health_status["checks"]["catalog"] = {
                "status": "healthy",
                "message": f"{len(products)} products available",
            }
        else:
            health_status["status"] = "degraded"
            health_status["checks"]["catalog"] = {
                "status": "degraded",
                "message": "Catalog is empty; run scripts/init_db.py to seed it",
            }
    except StoreError as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["catalog"] = {
            "status": "unhealthy",
            "message": f"Store unavailable: {str(e)}",
        }

    health_status["checks"]["conversations"] = {
        "status": "healthy",
        "active": len(registry.agents),
    }
    return health_status
