"""
Domain service: Project the hierarchy into a node/edge list for a
force-directed graph.

Hub -> Region -> Department -> Commune -> Delivery (dots).

Region and department nodes are sized so that visual AREA (not radius)
tracks allocated tonnage relative to their siblings, clamped to
[min_size, max_size]. A ring percentage encodes each node's own
completion rate independently of its size.
"""
from dataclasses import dataclass
from typing import Optional
import base64
import logging

import numpy as np
from pydantic import BaseModel, Field

from tracker.config import settings
from tracker.domain.models import RegionNode
from tracker.services.domain.stats import Level, calculate_node_stats, children_of

logger = logging.getLogger(__name__)

HUB_ID = "hub"

# Tailwind 500 shades
PALETTE = [
    "#3b82f6",  # blue
    "#10b981",  # green
    "#a855f7",  # purple
    "#ec4899",  # pink
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#06b6d4",  # cyan
]
HUB_COLOR = "#1e293b"
DELIVERY_COLOR = "#10b981"
COMMUNE_EDGE_COLOR = "#cbd5e1"

HUB_SIZE = 50
COMMUNE_SIZE = 8
DELIVERY_SIZE = 4


@dataclass
class SizingConfig:
    """Node sizing parameters for region/department nodes."""

    base_size: float = 90.0
    """Size of a node whose target equals the sibling average"""

    min_size: float = 50.0
    max_size: float = 160.0

    @classmethod
    def from_settings(cls) -> "SizingConfig":
        return cls(
            base_size=settings.graph_base_size,
            min_size=settings.graph_min_size,
            max_size=settings.graph_max_size,
        )


class GraphNode(BaseModel):
    id: str
    label: str
    level: str
    size: float
    color: str
    target: float = 0
    delivered: float = 0
    completion_rate: float = 0
    ring_percentage: Optional[int] = Field(
        default=None, description="Rounded completion (0-100) for the ring indicator"
    )
    parent_id: Optional[str] = None
    title: str = ""
    image: Optional[str] = Field(default=None, description="Ring indicator as an SVG data URI")


class GraphEdge(BaseModel):
    source: str
    target: str
    width: float
    color: str
    length: float
    opacity: float = 1.0


class NetworkGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


def node_size(
    target: float,
    average_target: float,
    config: Optional[SizingConfig] = None,
) -> float:
    """
    Size of a node relative to the average target of its siblings.

    ``clamp(min, max, base * sqrt(target / average))``. A zero average
    (all siblings at 0 T) draws every node at base size.
    """
    config = config or SizingConfig()
    target = max(target or 0, 0)
    ratio = target / average_target if average_target and average_target > 0 else 1.0
    raw = config.base_size * np.sqrt(ratio)
    return float(np.clip(raw, config.min_size, config.max_size))


def sibling_sizes(targets: list[float], config: Optional[SizingConfig] = None) -> list[float]:
    if not targets:
        return []
    average = float(np.mean(targets))
    return [node_size(t, average, config) for t in targets]


def ring_percentage(rate: float) -> int:
    return int(np.clip(round(rate or 0), 0, 100))


def completion_ring_svg(rate: float, color: str) -> str:
    """Render the completion ring as a base64 SVG data URI."""
    percentage = ring_percentage(rate)
    radius = 35
    circumference = 2 * np.pi * radius
    offset = circumference - (percentage / 100) * circumference
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="80" height="80" viewBox="0 0 80 80">'
        f'<circle cx="40" cy="40" r="{radius}" fill="#f3f4f6" stroke="#e5e7eb" stroke-width="2" />'
        f'<circle cx="40" cy="40" r="{radius}" fill="none" stroke="{color}" stroke-width="8" '
        f'stroke-dasharray="{circumference:.2f}" stroke-dashoffset="{offset:.2f}" '
        'transform="rotate(-90 40 40)" stroke-linecap="round" />'
        '<text x="50%" y="50%" text-anchor="middle" dy=".3em" font-family="sans-serif" '
        f'font-size="14" font-weight="bold" fill="#374151">{percentage}%</text>'
        '</svg>'
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def build_network_graph(
    regions: list[RegionNode],
    include_deliveries: bool = True,
    config: Optional[SizingConfig] = None,
) -> NetworkGraph:
    """
    Build graph nodes and edges from the hierarchy.

    Args:
        regions: Region nodes
        include_deliveries: Emit one dot per delivery under its commune
        config: Sizing parameters (defaults to application settings)

    Returns:
        NetworkGraph; only the hub node when there are no regions
    """
    config = config or SizingConfig.from_settings()
    graph = NetworkGraph()

    graph.nodes.append(GraphNode(
        id=HUB_ID,
        label=settings.graph_hub_label,
        level="hub",
        size=HUB_SIZE,
        color=HUB_COLOR,
    ))
    if not regions:
        return graph

    region_stats = [calculate_node_stats(r, Level.REGION) for r in regions]
    region_sizes = sibling_sizes([s.total_target for s in region_stats], config)

    for index, (region, stats, size) in enumerate(zip(regions, region_stats, region_sizes)):
        color = PALETTE[index % len(PALETTE)]
        region_node = _stat_node(region.id, region.name, Level.REGION, size, color, stats, None)
        region_node.image = completion_ring_svg(stats.completion_rate, color)
        graph.nodes.append(region_node)
        graph.edges.append(GraphEdge(
            source=HUB_ID, target=region.id, width=3, color=color, length=250, opacity=0.8,
        ))
        _add_departments(graph, region, color, include_deliveries, config)

    logger.info(f"Network graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return graph


def _stat_node(node_id, label, level, size, color, stats, parent_id) -> GraphNode:
    rate = stats.completion_rate
    return GraphNode(
        id=node_id,
        label=label,
        level=level.value,
        size=size,
        color=color,
        target=stats.total_target,
        delivered=stats.total_delivered,
        completion_rate=rate,
        ring_percentage=ring_percentage(rate),
        parent_id=parent_id,
        title=f"{label}\nCible: {stats.total_target:g} T\nLivré: {stats.total_delivered:g} T",
    )


def _add_departments(
    graph: NetworkGraph,
    region: RegionNode,
    color: str,
    include_deliveries: bool,
    config: SizingConfig,
) -> None:
    departments = children_of(region, Level.REGION)
    dept_stats = [calculate_node_stats(d, Level.DEPARTMENT) for d in departments]
    dept_sizes = sibling_sizes([s.total_target for s in dept_stats], config)

    for department, stats, size in zip(departments, dept_stats, dept_sizes):
        graph.nodes.append(
            _stat_node(department.id, department.name, Level.DEPARTMENT, size, color, stats, region.id)
        )
        graph.edges.append(GraphEdge(
            source=region.id, target=department.id, width=2, color=color, length=120, opacity=0.5,
        ))

        for commune in children_of(department, Level.DEPARTMENT):
            commune_stats = calculate_node_stats(commune, Level.COMMUNE)
            deliveries = [
                delivery
                for operator in children_of(commune, Level.COMMUNE)
                for allocation in children_of(operator, Level.OPERATOR)
                for delivery in children_of(allocation, Level.ALLOCATION)
            ]
            graph.nodes.append(GraphNode(
                id=commune.id,
                label=commune.name,
                level=Level.COMMUNE.value,
                size=COMMUNE_SIZE,
                color=color,
                target=commune_stats.total_target,
                delivered=commune_stats.total_delivered,
                completion_rate=commune_stats.completion_rate,
                parent_id=department.id,
                title=f"{commune.name}\nLivraisons: {len(deliveries)}\n"
                      f"Volume: {commune_stats.total_delivered:g} T",
            ))
            graph.edges.append(GraphEdge(
                source=department.id, target=commune.id, width=1,
                color=COMMUNE_EDGE_COLOR, length=80,
            ))

            if not include_deliveries:
                continue
            for delivery in deliveries:
                delivery_id = f"del-{delivery.id}"
                graph.nodes.append(GraphNode(
                    id=delivery_id,
                    label="",
                    level="delivery",
                    size=DELIVERY_SIZE,
                    color=DELIVERY_COLOR,
                    delivered=delivery.tonnage,
                    parent_id=commune.id,
                    title=f"{delivery.bl_number}\nCharge: {delivery.tonnage:g} T\n"
                          f"Camion: {delivery.truck_plate or '-'}\n"
                          f"Chauffeur: {delivery.driver_name or '-'}",
                ))
                graph.edges.append(GraphEdge(
                    source=commune.id, target=delivery_id, width=1,
                    color=DELIVERY_COLOR, length=20, opacity=0.4,
                ))

