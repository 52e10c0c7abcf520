"""
Domain service: Build the nested campaign hierarchy from flat table rows.

Region -> Department -> Commune -> Operator -> Allocation -> Delivery,
joined through the foreign keys carried by each row. The tree is rebuilt
from scratch for every snapshot; nothing is cached between calls.
"""
from collections import defaultdict
from typing import Iterable, Optional
import logging

from tracker.domain.models import (
    AllocationNode,
    AllocationRecord,
    Commune,
    CommuneNode,
    DeliveryNode,
    DeliveryRecord,
    Department,
    DepartmentNode,
    Operator,
    OperatorNode,
    Region,
    RegionNode,
)

logger = logging.getLogger(__name__)

ALL_PROJECTS = "all"


def _by_name(items):
    return sorted(items, key=lambda item: item.name.casefold())


def sort_most_recent_first(items: list, date_of) -> list:
    """Sort newest first; items without a date go last in input order."""
    dated = [item for item in items if date_of(item) is not None]
    undated = [item for item in items if date_of(item) is None]
    dated.sort(key=date_of, reverse=True)
    return dated + undated


def _group(items: Iterable, parent_of, known_parents: set, label: str) -> dict:
    grouped = defaultdict(list)
    orphans = 0
    for item in items:
        parent_id = parent_of(item)
        if parent_id not in known_parents:
            orphans += 1
            continue
        grouped[parent_id].append(item)
    if orphans:
        logger.debug(f"Dropped {orphans} {label} without a known parent")
    return grouped


def to_delivery_node(record: DeliveryRecord) -> DeliveryNode:
    return DeliveryNode(
        id=record.id,
        bl_number=record.bl_number,
        tonnage=record.tonnage_loaded,
        date=record.delivery_date,
        truck_plate=record.truck_plate,
        driver_id=record.driver_id,
        driver_name=record.driver_name,
    )


def filter_by_project(
    allocations: Iterable[AllocationRecord],
    project_id: Optional[str],
) -> list[AllocationRecord]:
    """Keep the allocations of one project; ``None`` or ``"all"`` keeps all."""
    allocations = list(allocations or [])
    if not project_id or project_id == ALL_PROJECTS:
        return allocations
    return [a for a in allocations if a.project_id == project_id]


def build_global_hierarchy(
    regions: Iterable[Region],
    departments: Iterable[Department],
    communes: Iterable[Commune],
    operators: Iterable[Operator],
    allocations: Iterable[AllocationRecord],
    deliveries: Iterable[DeliveryRecord],
    project_id: Optional[str] = None,
) -> list[RegionNode]:
    """
    Join flat rows into the nested hierarchy.

    Allocation ``delivered`` is the sum of ``tonnage_loaded`` over its
    deliveries. Geographic levels and operators are sorted by name,
    allocations by key, deliveries newest first.

    Args:
        regions: Region rows
        departments: Department rows (``region_id``)
        communes: Commune rows (``department_id``)
        operators: Operator rows (``commune_id``)
        allocations: Allocation rows (``operator_id``)
        deliveries: Delivery rows (``allocation_id``)
        project_id: Optional project filter applied to allocations

    Returns:
        Region nodes sorted by name; empty when there are no regions
    """
    regions = list(regions or [])
    departments = list(departments or [])
    communes = list(communes or [])
    operators = list(operators or [])
    all_allocations = list(allocations or [])
    allocations = filter_by_project(all_allocations, project_id)

    # Orphans are checked against every allocation; deliveries of
    # allocations outside the project are never looked up.
    deliveries_by_allocation = _group(
        deliveries or [],
        lambda d: d.allocation_id,
        {a.id for a in all_allocations},
        "deliveries",
    )

    allocations_by_operator = _group(
        allocations, lambda a: a.operator_id, {o.id for o in operators}, "allocations"
    )
    operators_by_commune = _group(
        operators, lambda o: o.commune_id, {c.id for c in communes}, "operators"
    )
    communes_by_department = _group(
        communes, lambda c: c.department_id, {d.id for d in departments}, "communes"
    )
    departments_by_region = _group(
        departments, lambda d: d.region_id, {r.id for r in regions}, "departments"
    )

    def build_allocation(record: AllocationRecord) -> AllocationNode:
        delivery_rows = deliveries_by_allocation.get(record.id, [])
        nodes = [to_delivery_node(d) for d in delivery_rows]
        return AllocationNode(
            id=record.id,
            allocation_key=record.allocation_key,
            target=record.target_tonnage,
            delivered=sum(d.tonnage for d in nodes),
            deliveries=sort_most_recent_first(nodes, lambda d: d.date),
        )

    def build_operator(operator: Operator) -> OperatorNode:
        records = sorted(
            allocations_by_operator.get(operator.id, []),
            key=lambda a: a.allocation_key,
        )
        return OperatorNode(
            id=operator.id,
            name=operator.name,
            is_coop=operator.is_coop,
            allocations=[build_allocation(a) for a in records],
        )

    def build_commune(commune: Commune) -> CommuneNode:
        return CommuneNode(
            id=commune.id,
            name=commune.name,
            operators=[
                build_operator(o) for o in _by_name(operators_by_commune.get(commune.id, []))
            ],
        )

    def build_department(department: Department) -> DepartmentNode:
        return DepartmentNode(
            id=department.id,
            name=department.name,
            communes=[
                build_commune(c)
                for c in _by_name(communes_by_department.get(department.id, []))
            ],
        )

    hierarchy = [
        RegionNode(
            id=region.id,
            name=region.name,
            departments=[
                build_department(d)
                for d in _by_name(departments_by_region.get(region.id, []))
            ],
        )
        for region in _by_name(regions)
    ]

    logger.info(
        f"Built hierarchy: {len(hierarchy)} regions, {len(allocations)} allocations "
        f"(project={project_id or ALL_PROJECTS})"
    )
    return hierarchy
