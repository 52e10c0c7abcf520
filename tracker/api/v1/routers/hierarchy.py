"""
API router for hierarchy endpoints.
"""
from dataclasses import asdict
from fastapi import APIRouter, Query
from typing import Annotated, Optional

from tracker.api.dependencies import CampaignServiceDep
from tracker.api.errors import COMMON_RESPONSES, to_http_exception
from tracker.api.v1.models.responses import (
    ColumnResponse,
    GlobalViewResponse,
    HierarchyResponse,
    SummaryResponse,
)
from tracker.infrastructure.supabase_client import SupabaseAPIError
from tracker.services.domain.hierarchy_builder import ALL_PROJECTS
from tracker.services.domain.selection import DrillDownSelection
from tracker.services.domain.stats import Level, zone_stats


router = APIRouter(
    prefix="/hierarchy",
    tags=["hierarchy"],
)

ProjectQuery = Annotated[
    str,
    Query(description="Project id to filter allocations on, or 'all'"),
]


@router.get(
    "",
    response_model=HierarchyResponse,
    summary="Get the campaign hierarchy",
    description="""
    Region -> Department -> Commune -> Operator -> Allocation -> Delivery,
    built from the flat campaign tables. Allocation `delivered` is the sum
    of loaded tonnage over its deliveries.
    """,
    responses=COMMON_RESPONSES,
)
async def get_hierarchy(
    campaign_service: CampaignServiceDep,
    project_id: ProjectQuery = ALL_PROJECTS,
) -> HierarchyResponse:
    try:
        regions = await campaign_service.get_hierarchy(project_id)
    except SupabaseAPIError as e:
        raise to_http_exception(e, "campaign hierarchy")

    return HierarchyResponse(
        project_id=project_id,
        stats=zone_stats(regions),
        regions=regions,
    )


@router.get(
    "/global-view",
    response_model=GlobalViewResponse,
    summary="Drill-down columns with roll-up stats",
    description="""
    Returns one column per selected level. Each column header carries the
    NodeStats of the selected parent: `count` is the number of immediate
    children, totals sum every allocation beneath it.

    Selecting a level without its ancestors yields only the region column.
    With no selection at all, the first region (by name) is auto-selected
    unless `auto_select=false`.
    """,
    responses=COMMON_RESPONSES,
)
async def get_global_view(
    campaign_service: CampaignServiceDep,
    project_id: ProjectQuery = ALL_PROJECTS,
    region_id: Optional[str] = None,
    department_id: Optional[str] = None,
    commune_id: Optional[str] = None,
    operator_id: Optional[str] = None,
    allocation_id: Optional[str] = None,
    auto_select: bool = True,
) -> GlobalViewResponse:
    """
    Get the drill-down columns for a selection.

    Args:
        campaign_service: Campaign service (injected dependency)
        project_id: Project filter
        region_id ... allocation_id: Selected node per level
        auto_select: Auto-select the first region when nothing is selected

    Returns:
        GlobalViewResponse with the visible columns
    """
    selection = DrillDownSelection()
    for level, node_id in (
        (Level.REGION, region_id),
        (Level.DEPARTMENT, department_id),
        (Level.COMMUNE, commune_id),
        (Level.OPERATOR, operator_id),
        (Level.ALLOCATION, allocation_id),
    ):
        if node_id is not None:
            selection.select(level, node_id)

    try:
        columns = await campaign_service.get_global_view(
            selection, project_id=project_id, auto_select=auto_select
        )
    except SupabaseAPIError as e:
        raise to_http_exception(e, "campaign hierarchy")

    return GlobalViewResponse(
        project_id=project_id,
        columns=[ColumnResponse(**asdict(column)) for column in columns],
    )


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Campaign totals and per-region performance",
    responses=COMMON_RESPONSES,
)
async def get_summary(
    campaign_service: CampaignServiceDep,
    project_id: ProjectQuery = ALL_PROJECTS,
) -> SummaryResponse:
    try:
        summary, regions = await campaign_service.get_summary(project_id)
    except SupabaseAPIError as e:
        raise to_http_exception(e, "campaign summary")

    return SummaryResponse(
        project_id=project_id,
        regions=regions,
        **summary.model_dump(),
    )
