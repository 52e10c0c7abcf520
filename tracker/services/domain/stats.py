"""
Domain service: Bottom-up tonnage roll-up over the campaign hierarchy.

Every non-leaf node gets a NodeStats:
- total_target / total_delivered: sums over ALL allocation leaves beneath it
- count: number of IMMEDIATE children (departments of a region, communes of
  a department, operators of a commune, allocations of an operator,
  deliveries of an allocation)

Column headers display "12 departments, 4,500 / 10,000 T" from a single
NodeStats.
"""
from enum import Enum
from typing import Callable, Iterable, Union
import logging

from tracker.domain.models import (
    AllocationNode,
    CommuneNode,
    DashboardSummary,
    DeliveryNode,
    DepartmentNode,
    NodeStats,
    OperatorNode,
    RegionNode,
    RegionPerformance,
)

logger = logging.getLogger(__name__)

HierarchyNode = Union[RegionNode, DepartmentNode, CommuneNode, OperatorNode, AllocationNode]


class Level(str, Enum):
    """Fixed levels of the hierarchy, top to bottom."""
    REGION = "region"
    DEPARTMENT = "dept"
    COMMUNE = "commune"
    OPERATOR = "operator"
    ALLOCATION = "allocation"


class ProgressStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


# Level -> (children accessor, level of those children).
# Allocations are leaves for the roll-up; their deliveries only feed ``count``.
CHILDREN: dict[Level, tuple[Callable[[HierarchyNode], list], Union[Level, None]]] = {
    Level.REGION: (lambda node: node.departments, Level.DEPARTMENT),
    Level.DEPARTMENT: (lambda node: node.communes, Level.COMMUNE),
    Level.COMMUNE: (lambda node: node.operators, Level.OPERATOR),
    Level.OPERATOR: (lambda node: node.allocations, Level.ALLOCATION),
    Level.ALLOCATION: (lambda node: node.deliveries, None),
}


def children_of(node: HierarchyNode, level: Level) -> list:
    """Immediate children of a node, empty when the collection is missing."""
    accessor, _ = CHILDREN[level]
    return accessor(node) or []


def completion_rate(delivered: float, target: float) -> float:
    """
    Percentage of target delivered.

    Returns 0 when the target is 0 (or missing) so that NaN/Infinity never
    reaches a display.
    """
    delivered = delivered or 0
    target = target or 0
    if target > 0:
        return delivered / target * 100
    return 0.0


def progress_status(rate: float) -> ProgressStatus:
    if rate >= 100:
        return ProgressStatus.COMPLETE
    if rate > 0:
        return ProgressStatus.IN_PROGRESS
    return ProgressStatus.PENDING


def _sum_leaves(node: HierarchyNode, level: Level) -> tuple[float, float]:
    if level is Level.ALLOCATION:
        return node.target or 0, node.delivered or 0

    _, child_level = CHILDREN[level]
    total_target = 0.0
    total_delivered = 0.0
    for child in children_of(node, level):
        target, delivered = _sum_leaves(child, child_level)
        total_target += target
        total_delivered += delivered
    return total_target, total_delivered


def calculate_node_stats(node: HierarchyNode, level: Level) -> NodeStats:
    """
    Compute the NodeStats of a single node.

    Args:
        node: Hierarchy node at ``level``
        level: Level tag selecting which child collection to descend through

    Returns:
        NodeStats with leaf totals and immediate child count
    """
    level = Level(level)
    total_target, total_delivered = _sum_leaves(node, level)
    return NodeStats(
        count=len(children_of(node, level)),
        total_target=total_target,
        total_delivered=total_delivered,
    )


def zone_stats(regions: Iterable[RegionNode]) -> NodeStats:
    """Stats for the top column: count is the number of regions."""
    regions = list(regions or [])
    total_target = 0.0
    total_delivered = 0.0
    for region in regions:
        stats = calculate_node_stats(region, Level.REGION)
        total_target += stats.total_target
        total_delivered += stats.total_delivered
    return NodeStats(
        count=len(regions),
        total_target=total_target,
        total_delivered=total_delivered,
    )


def delivery_list_stats(deliveries: Iterable[DeliveryNode]) -> NodeStats:
    """Stats for a delivery column: no target, delivered is loaded tonnage."""
    deliveries = list(deliveries or [])
    return NodeStats(
        count=len(deliveries),
        total_target=0,
        total_delivered=sum(d.tonnage or 0 for d in deliveries),
    )


def iter_allocations(region: RegionNode) -> Iterable[AllocationNode]:
    for department in children_of(region, Level.REGION):
        for commune in children_of(department, Level.DEPARTMENT):
            for operator in children_of(commune, Level.COMMUNE):
                yield from children_of(operator, Level.OPERATOR)


def region_performance(regions: Iterable[RegionNode]) -> list[RegionPerformance]:
    """Target vs delivered per region, in input order."""
    performance = []
    for region in regions or []:
        stats = calculate_node_stats(region, Level.REGION)
        delivery_count = sum(
            len(children_of(allocation, Level.ALLOCATION))
            for allocation in iter_allocations(region)
        )
        performance.append(RegionPerformance(
            region_id=region.id,
            region_name=region.name,
            target_tonnage=stats.total_target,
            delivered_tonnage=stats.total_delivered,
            delivery_count=delivery_count,
            completion_rate=stats.completion_rate,
        ))
    return performance


def count_over_delivered(regions: Iterable[RegionNode]) -> int:
    """Number of allocations whose delivered tonnage exceeds the target."""
    alerts = 0
    for region in regions or []:
        for allocation in iter_allocations(region):
            if (allocation.delivered or 0) > (allocation.target or 0):
                alerts += 1
    if alerts:
        logger.info(f"{alerts} allocation(s) over-delivered")
    return alerts


def dashboard_summary(regions: Iterable[RegionNode]) -> DashboardSummary:
    regions = list(regions or [])
    totals = zone_stats(regions)
    return DashboardSummary(
        total_target=totals.total_target,
        total_delivered=totals.total_delivered,
        completion_rate=totals.completion_rate,
        alerts=count_over_delivered(regions),
    )
