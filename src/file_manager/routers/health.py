import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends

from file_manager.dependencies import get_file_registry, get_settings_from_app
from file_manager.registry import FileRegistry
from file_manager.schemas import HealthResponse
from file_manager.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(
    settings: Settings = Depends(get_settings_from_app),
    registry: FileRegistry = Depends(get_file_registry),
):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and object store along with deployment mode.
    """
    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "storage": "ready",
        },
        "ready": False,
    }

    # Check the bucket is reachable with the configured credentials
    try:
        registry.store.s3_client.head_bucket(Bucket=registry.store.bucket_name)
    except (BotoCoreError, ClientError) as e:
        logger.warning(f"Health check could not reach bucket {registry.store.bucket_name}: {e}")
        health_status["components"]["storage"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        component == "ready" for component in health_status["components"].values()
    )
    return health_status
