"""
Manual collection trigger.

Runs one collection pass synchronously (no trend analysis) and reports how
many sources succeeded or failed. Runs are not coordinated with the
scheduler.
"""

import structlog
from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from trend_monitor.api.dependencies import get_collection_service
from trend_monitor.api.models import CollectResponse, ErrorResponse
from trend_monitor.services.collection_service import CollectionService

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post(
    "/collect",
    response_model=CollectResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Run a collection pass now",
)
async def trigger_collection(
    service: CollectionService = Depends(get_collection_service),
):
    try:
        summary = await service.run()
    except Exception as e:
        logger.error("Manual collection failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=str(e)).model_dump(),
        )

    logger.info(
        "Manual collection completed",
        successful=summary.successful_sources,
        failed=summary.failed_sources,
    )
    return CollectResponse(
        successful=summary.successful_sources,
        failed=summary.failed_sources,
    )


@router.options("/collect", status_code=204, include_in_schema=False)
async def collect_preflight() -> Response:
    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Methods": "POST",
            "Access-Control-Allow-Headers": "Content-Type",
        },
    )
