"""
API router for driver performance endpoints.
"""
from fastapi import APIRouter, HTTPException, Path, Query
from typing import Annotated

from tracker.api.dependencies import CampaignServiceDep
from tracker.api.errors import COMMON_RESPONSES, to_http_exception
from tracker.api.v1.models.responses import DriverDetailResponse, DriversResponse
from tracker.infrastructure.supabase_client import SupabaseAPIError
from tracker.services.domain.hierarchy_builder import ALL_PROJECTS


router = APIRouter(
    prefix="/drivers",
    tags=["drivers"],
)


@router.get(
    "",
    response_model=DriversResponse,
    summary="Driver performance ranking",
    description="""
    One entry per driver, ranked by total loaded tonnage (what left the
    yard, not what was confirmed on arrival). Deliveries without a driver
    are grouped under the `unknown` bucket.
    """,
    responses=COMMON_RESPONSES,
)
async def list_drivers(
    campaign_service: CampaignServiceDep,
    project_id: Annotated[str, Query(description="Project id or 'all'")] = ALL_PROJECTS,
) -> DriversResponse:
    try:
        drivers = await campaign_service.get_driver_stats(project_id)
    except SupabaseAPIError as e:
        raise to_http_exception(e, "deliveries")

    return DriversResponse(
        project_id=project_id,
        driver_count=len(drivers),
        drivers=drivers,
    )


@router.get(
    "/{driver_id}",
    response_model=DriverDetailResponse,
    summary="Driver detail figures",
    responses=COMMON_RESPONSES,
)
async def get_driver(
    driver_id: Annotated[str, Path(description="Driver id, or 'unknown' for unassigned deliveries")],
    campaign_service: CampaignServiceDep,
    project_id: Annotated[str, Query(description="Project id or 'all'")] = ALL_PROJECTS,
) -> DriverDetailResponse:
    """
    Get the dashboard of a single driver.

    Raises:
        HTTPException: 404 if the driver has no delivery in the project
    """
    try:
        dashboard = await campaign_service.get_driver_dashboard(driver_id, project_id)
    except SupabaseAPIError as e:
        raise to_http_exception(e, "deliveries")

    if dashboard is None:
        raise HTTPException(
            status_code=404,
            detail=f"No deliveries found for driver '{driver_id}'",
        )

    return DriverDetailResponse(project_id=project_id, **dashboard.model_dump())
