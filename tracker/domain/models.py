"""
Domain models for the campaign hierarchy.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).

Flat records mirror the rows of the remote tables. Hierarchy nodes are the
nested tree built from them. Missing numbers and child collections are
coalesced to 0 / [] at validation time so that aggregation never has to
guard against ``None``.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, computed_field, field_validator


def _zero_if_none(value):
    return 0 if value is None else value


def _empty_if_none(value):
    return [] if value is None else value


class CampaignModel(BaseModel):
    """Base for campaign rows and nodes; numeric ids are accepted as strings."""

    class Config:
        coerce_numbers_to_str = True


# ============================================================
# Flat records
# ============================================================

class Region(CampaignModel):
    """Region row."""
    id: str
    name: str
    code: Optional[str] = None


class Department(CampaignModel):
    """Department row."""
    id: str
    region_id: str
    name: str
    code: Optional[str] = None


class Commune(CampaignModel):
    """Commune row."""
    id: str
    department_id: str
    name: str
    code: Optional[str] = None


class Operator(CampaignModel):
    """Operator (individual farmer or cooperative/GIE) row."""
    id: str
    name: str
    commune_id: str
    is_coop: bool = False
    phone: Optional[str] = None

    @field_validator("is_coop", mode="before")
    @classmethod
    def coerce_coop_flag(cls, value):
        return bool(value)


class AllocationRecord(CampaignModel):
    """Allocation row: a tonnage target assigned to an operator."""
    id: str
    allocation_key: str = ""
    operator_id: str
    region_id: Optional[str] = None
    department_id: Optional[str] = None
    commune_id: Optional[str] = None
    target_tonnage: float = Field(default=0, description="Target tonnage in T")
    project_id: Optional[str] = None
    responsible_name: Optional[str] = None

    @field_validator("target_tonnage", mode="before")
    @classmethod
    def coalesce_target(cls, value):
        return _zero_if_none(value)


class DeliveryRecord(CampaignModel):
    """Delivery joined with its truck, driver and allocation context."""
    id: str
    allocation_id: Optional[str] = None
    bl_number: str = ""
    truck_id: Optional[str] = None
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    truck_plate: Optional[str] = None
    tonnage_loaded: float = Field(default=0, description="Tonnage that left the yard")
    tonnage_delivered: Optional[float] = Field(
        default=None, description="Tonnage confirmed on arrival, if any"
    )
    delivery_date: Optional[datetime] = None
    region_name: Optional[str] = None
    commune_name: Optional[str] = None
    operator_name: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator("tonnage_loaded", mode="before")
    @classmethod
    def coalesce_loaded(cls, value):
        return _zero_if_none(value)


# ============================================================
# Hierarchy nodes
# ============================================================

class DeliveryNode(CampaignModel):
    """Leaf under an allocation."""
    id: str
    bl_number: str = ""
    tonnage: float = 0
    date: Optional[datetime] = None
    truck_plate: Optional[str] = None
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None

    @field_validator("tonnage", mode="before")
    @classmethod
    def coalesce_tonnage(cls, value):
        return _zero_if_none(value)


class AllocationNode(CampaignModel):
    id: str
    allocation_key: str = ""
    target: float = 0
    delivered: float = 0
    deliveries: List[DeliveryNode] = Field(default_factory=list)

    @field_validator("target", "delivered", mode="before")
    @classmethod
    def coalesce_numbers(cls, value):
        return _zero_if_none(value)

    @field_validator("deliveries", mode="before")
    @classmethod
    def coalesce_children(cls, value):
        return _empty_if_none(value)


class OperatorNode(CampaignModel):
    id: str
    name: str
    is_coop: bool = False
    allocations: List[AllocationNode] = Field(default_factory=list)

    @field_validator("allocations", mode="before")
    @classmethod
    def coalesce_children(cls, value):
        return _empty_if_none(value)


class CommuneNode(CampaignModel):
    id: str
    name: str
    operators: List[OperatorNode] = Field(default_factory=list)

    @field_validator("operators", mode="before")
    @classmethod
    def coalesce_children(cls, value):
        return _empty_if_none(value)


class DepartmentNode(CampaignModel):
    id: str
    name: str
    communes: List[CommuneNode] = Field(default_factory=list)

    @field_validator("communes", mode="before")
    @classmethod
    def coalesce_children(cls, value):
        return _empty_if_none(value)


class RegionNode(CampaignModel):
    """Top of the hierarchy."""
    id: str
    name: str
    departments: List[DepartmentNode] = Field(default_factory=list)

    @field_validator("departments", mode="before")
    @classmethod
    def coalesce_children(cls, value):
        return _empty_if_none(value)


# ============================================================
# Derived entities
# ============================================================

class NodeStats(BaseModel):
    """
    Roll-up attached to a hierarchy node.

    ``total_target`` and ``total_delivered`` sum every allocation leaf
    beneath the node. ``count`` is the number of immediate children only.
    """
    count: int = 0
    total_target: float = 0
    total_delivered: float = 0

    @computed_field
    @property
    def completion_rate(self) -> float:
        if self.total_target > 0:
            return self.total_delivered / self.total_target * 100
        return 0.0


class DriverStat(CampaignModel):
    """Per-driver performance bucket."""
    driver_id: str
    driver_name: str
    truck_plate: str
    total_tonnage: float = 0
    trip_count: int = 0
    deliveries: List[DeliveryRecord] = Field(default_factory=list)


class RegionPerformance(CampaignModel):
    """Per-region target vs delivered figures for charts."""
    region_id: str
    region_name: str
    target_tonnage: float
    delivered_tonnage: float
    delivery_count: int
    completion_rate: float


class DashboardSummary(BaseModel):
    """Campaign-wide totals shown above the charts."""
    total_target: float = 0
    total_delivered: float = 0
    completion_rate: float = 0
    alerts: int = Field(default=0, description="Allocations delivered beyond their target")
