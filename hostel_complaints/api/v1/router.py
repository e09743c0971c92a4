"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the hostel complaints service
"""
from fastapi import APIRouter

from hostel_complaints.api.v1 import admin_complaints, assignment, complaints, staff
from hostel_complaints.config.settings import settings
from hostel_complaints.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"}
    }
)

router.include_router(complaints.router)
router.include_router(admin_complaints.router)
router.include_router(staff.router)
router.include_router(assignment.router)

logger.debug(f"API v1 routes registered: {len(router.routes)}")


# Health and diagnostic endpoints
@router.get("/health", tags=["System Health"])
async def api_health_check():
    """
    API health check with registered route count
    """
    return {
        "status": "healthy",
        "version": settings.API_VERSION,
        "api_version": "v1",
        "total_routes": len(router.routes),
        "description": "Hostel Complaints Service API v1"
    }
