"""
Application service: Orchestration layer for campaign hierarchy views.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import asyncio
import logging

from tracker.domain.models import (
    DashboardSummary,
    DeliveryRecord,
    DriverStat,
    NodeStats,
    RegionNode,
    RegionPerformance,
)
from tracker.infrastructure.supabase_client import SupabaseClient
from tracker.services.domain.driver_performance import (
    DriverDashboard,
    build_driver_dashboard,
    build_driver_stats,
    filter_deliveries_by_project,
)
from tracker.services.domain.hierarchy_builder import build_global_hierarchy
from tracker.services.domain.network_graph import NetworkGraph, build_network_graph
from tracker.services.domain.selection import DrillDownSelection
from tracker.services.domain.stats import (
    CHILDREN,
    Level,
    calculate_node_stats,
    children_of,
    completion_rate,
    dashboard_summary,
    delivery_list_stats,
    progress_status,
    region_performance,
    zone_stats,
)

logger = logging.getLogger(__name__)


@dataclass
class ColumnItem:
    id: str
    label: str
    stats: NodeStats
    sub_label: Optional[str] = None
    status: Optional[str] = None


@dataclass
class HierarchyColumn:
    level: str
    stats: NodeStats
    items: List[ColumnItem] = field(default_factory=list)
    selected_id: Optional[str] = None


@dataclass
class CampaignSnapshot:
    hierarchy: List[RegionNode]
    deliveries: List[DeliveryRecord]


class CampaignService:
    """
    Application service for the campaign views.

    Orchestrates data fetching and domain computations.
    No business logic here, only coordination between infrastructure and
    domain layers. Every call recomputes from a fresh snapshot.
    """

    def __init__(self, client: SupabaseClient):
        """
        Initialize the service with dependencies.

        Args:
            client: Supabase client for data fetching
        """
        self.client = client

    async def load_snapshot(self, project_id: Optional[str] = None) -> CampaignSnapshot:
        """
        Fetch all tables concurrently and build the hierarchy.

        Args:
            project_id: Optional project filter (``"all"`` or None for every project)

        Returns:
            CampaignSnapshot with the built hierarchy and the project's deliveries

        Raises:
            SupabaseAPIError: If data fetching fails
        """
        regions, departments, communes, operators, allocations, deliveries = await asyncio.gather(
            self.client.get_regions(),
            self.client.get_departments(),
            self.client.get_communes(),
            self.client.get_operators(),
            self.client.get_allocations(),
            self.client.get_deliveries(),
        )
        hierarchy = build_global_hierarchy(
            regions=regions,
            departments=departments,
            communes=communes,
            operators=operators,
            allocations=allocations,
            deliveries=deliveries,
            project_id=project_id,
        )
        return CampaignSnapshot(
            hierarchy=hierarchy,
            deliveries=filter_deliveries_by_project(deliveries, project_id),
        )

    async def get_hierarchy(self, project_id: Optional[str] = None) -> List[RegionNode]:
        snapshot = await self.load_snapshot(project_id)
        return snapshot.hierarchy

    async def get_global_view(
        self,
        selection: DrillDownSelection,
        project_id: Optional[str] = None,
        auto_select: bool = True,
    ) -> List[HierarchyColumn]:
        snapshot = await self.load_snapshot(project_id)
        if auto_select and selection.is_empty():
            selection.on_data_loaded(snapshot.hierarchy)
        return build_columns(snapshot.hierarchy, selection)

    async def get_summary(
        self,
        project_id: Optional[str] = None,
    ) -> tuple[DashboardSummary, List[RegionPerformance]]:
        snapshot = await self.load_snapshot(project_id)
        return dashboard_summary(snapshot.hierarchy), region_performance(snapshot.hierarchy)

    async def get_driver_stats(self, project_id: Optional[str] = None) -> List[DriverStat]:
        snapshot = await self.load_snapshot(project_id)
        return build_driver_stats(snapshot.deliveries)

    async def get_driver_dashboard(
        self,
        driver_id: str,
        project_id: Optional[str] = None,
    ) -> Optional[DriverDashboard]:
        drivers = await self.get_driver_stats(project_id)
        stat = next((d for d in drivers if d.driver_id == driver_id), None)
        if stat is None:
            return None
        return build_driver_dashboard(stat)

    async def get_network_graph(
        self,
        project_id: Optional[str] = None,
        include_deliveries: bool = True,
    ) -> NetworkGraph:
        snapshot = await self.load_snapshot(project_id)
        return build_network_graph(snapshot.hierarchy, include_deliveries=include_deliveries)


def _item(node, level: Level) -> ColumnItem:
    stats = calculate_node_stats(node, level)
    if level is Level.ALLOCATION:
        rate = completion_rate(node.delivered, node.target)
        return ColumnItem(
            id=node.id,
            label=node.allocation_key,
            stats=stats,
            status=progress_status(rate).value,
        )
    sub_label = None
    if level is Level.OPERATOR:
        sub_label = "Coopérative / GIE" if node.is_coop else "Individuel"
    return ColumnItem(id=node.id, label=node.name, stats=stats, sub_label=sub_label)


def build_columns(
    hierarchy: List[RegionNode],
    selection: DrillDownSelection,
) -> List[HierarchyColumn]:
    """
    Lay out the drill-down columns for a selection.

    The region column is always present. Each further column lists the
    children of the node selected in the previous one, headed by that
    node's NodeStats. A selected allocation adds a delivery column.
    """
    path = selection.resolve(hierarchy)

    columns = [HierarchyColumn(
        level=Level.REGION.value,
        stats=zone_stats(hierarchy),
        items=[_item(r, Level.REGION) for r in hierarchy],
        selected_id=path.region.id if path.region else None,
    )]

    chain = [
        (path.region, Level.REGION, path.department),
        (path.department, Level.DEPARTMENT, path.commune),
        (path.commune, Level.COMMUNE, path.operator),
        (path.operator, Level.OPERATOR, path.allocation),
    ]
    for parent, parent_level, selected_child in chain:
        if parent is None:
            return columns
        _, child_level = CHILDREN[parent_level]
        columns.append(HierarchyColumn(
            level=child_level.value,
            stats=calculate_node_stats(parent, parent_level),
            items=[_item(child, child_level) for child in children_of(parent, parent_level)],
            selected_id=selected_child.id if selected_child else None,
        ))

    if path.allocation is not None:
        deliveries = path.allocation.deliveries
        columns.append(HierarchyColumn(
            level="delivery",
            stats=delivery_list_stats(deliveries),
            items=[
                ColumnItem(
                    id=d.id,
                    label=d.bl_number,
                    stats=NodeStats(count=0, total_target=0, total_delivered=d.tonnage),
                    sub_label=" / ".join(filter(None, [d.truck_plate, d.driver_name])) or None,
                )
                for d in deliveries
            ],
        ))
    return columns
