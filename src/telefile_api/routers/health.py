from fastapi import APIRouter, Request

from entity_store import StorageUnavailable

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and backend readiness.

    Returns status of the API and key-value backend along with deployment mode.
    """
    settings = request.app.state.settings
    store = request.app.state.store

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "storage": "ready",
        },
    }

    try:
        if not store.adapter.ping():
            health_status["components"]["storage"] = "unreachable"
            health_status["status"] = "degraded"
    except StorageUnavailable as e:
        health_status["components"]["storage"] = f"error: {e}"
        health_status["status"] = "degraded"

    return health_status
