"""
API router for the distribution network graph.
"""
from fastapi import APIRouter, Query
from typing import Annotated

from tracker.api.dependencies import CampaignServiceDep
from tracker.api.errors import COMMON_RESPONSES, to_http_exception
from tracker.api.v1.models.responses import NetworkResponse
from tracker.infrastructure.supabase_client import SupabaseAPIError
from tracker.services.domain.hierarchy_builder import ALL_PROJECTS


router = APIRouter(
    prefix="/network",
    tags=["network"],
)


@router.get(
    "",
    response_model=NetworkResponse,
    summary="Force-directed graph of the distribution network",
    description="""
    Hub -> Region -> Department -> Commune -> Delivery.

    Region and department sizes follow
    `clamp(50, 160, 90 * sqrt(target / sibling_average))`; the
    `ring_percentage` field carries each node's own completion rate.
    """,
    responses=COMMON_RESPONSES,
)
async def get_network(
    campaign_service: CampaignServiceDep,
    project_id: Annotated[str, Query(description="Project id or 'all'")] = ALL_PROJECTS,
    include_deliveries: bool = True,
) -> NetworkResponse:
    try:
        graph = await campaign_service.get_network_graph(
            project_id, include_deliveries=include_deliveries
        )
    except SupabaseAPIError as e:
        raise to_http_exception(e, "network data")

    return NetworkResponse(project_id=project_id, nodes=graph.nodes, edges=graph.edges)
