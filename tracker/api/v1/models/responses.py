"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from tracker.domain.models import DriverStat, NodeStats, RegionNode, RegionPerformance
from tracker.services.domain.driver_performance import TonnageShare, TripPoint
from tracker.services.domain.network_graph import GraphEdge, GraphNode


class HierarchyResponse(BaseModel):
    """Response model for the full hierarchy endpoint."""
    project_id: str = Field(description="Project filter applied ('all' for none)")
    stats: NodeStats = Field(description="Totals over every region")
    regions: List[RegionNode]


class ColumnItemResponse(BaseModel):
    id: str
    label: str
    stats: NodeStats
    sub_label: Optional[str] = None
    status: Optional[str] = Field(
        default=None, description="pending / in_progress / complete (allocations only)"
    )


class ColumnResponse(BaseModel):
    """One drill-down column, headed by the stats of its parent node."""
    level: str = Field(description="Level of the listed items")
    stats: NodeStats
    items: List[ColumnItemResponse]
    selected_id: Optional[str] = None


class GlobalViewResponse(BaseModel):
    project_id: str
    columns: List[ColumnResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "project_id": "all",
                "columns": [
                    {
                        "level": "region",
                        "stats": {
                            "count": 1,
                            "total_target": 500.0,
                            "total_delivered": 40.0,
                            "completion_rate": 8.0,
                        },
                        "items": [
                            {
                                "id": "reg_2",
                                "label": "Thiès",
                                "stats": {
                                    "count": 1,
                                    "total_target": 500.0,
                                    "total_delivered": 40.0,
                                    "completion_rate": 8.0,
                                },
                            }
                        ],
                        "selected_id": "reg_2",
                    }
                ],
            }
        }


class SummaryResponse(BaseModel):
    """Dashboard totals and per-region chart data."""
    project_id: str
    total_target: float
    total_delivered: float
    completion_rate: float
    alerts: int = Field(description="Allocations delivered beyond their target")
    regions: List[RegionPerformance]


class DriversResponse(BaseModel):
    project_id: str
    driver_count: int
    drivers: List[DriverStat]


class DriverDetailResponse(BaseModel):
    project_id: str
    driver: DriverStat
    average_tonnage: float
    max_tonnage: float
    region_distribution: List[TonnageShare]
    progression: List[TripPoint]


class NetworkResponse(BaseModel):
    project_id: str
    nodes: List[GraphNode]
    edges: List[GraphEdge]
