"""
Domain service: Driver performance roll-up over the flat delivery list.

Drivers are ranked on ``tonnage_loaded`` (what left the yard), not on
``tonnage_delivered``. Deliveries without a driver are grouped under a
sentinel bucket instead of being dropped.
"""
from typing import Iterable, Optional
import logging

from pydantic import BaseModel, Field

from tracker.config import settings
from tracker.domain.models import DeliveryRecord, DriverStat
from tracker.services.domain.hierarchy_builder import ALL_PROJECTS, sort_most_recent_first

logger = logging.getLogger(__name__)

NO_PLATE = "-"
UNKNOWN_REGION = "Inconnu"


class TonnageShare(BaseModel):
    name: str
    value: float


class TripPoint(BaseModel):
    index: int
    tonnage: float
    date: Optional[str] = None


class DriverDashboard(BaseModel):
    """Detail panel figures for a single driver."""
    driver: DriverStat
    average_tonnage: float = Field(description="Loaded tonnage per trip")
    max_tonnage: float = Field(description="Largest single load")
    region_distribution: list[TonnageShare]
    progression: list[TripPoint]


def filter_deliveries_by_project(
    deliveries: Iterable[DeliveryRecord],
    project_id: Optional[str],
) -> list[DeliveryRecord]:
    deliveries = list(deliveries or [])
    if not project_id or project_id == ALL_PROJECTS:
        return deliveries
    return [d for d in deliveries if d.project_id == project_id]


def build_driver_stats(
    deliveries: Iterable[DeliveryRecord],
    unknown_driver_id: Optional[str] = None,
    unknown_driver_label: Optional[str] = None,
) -> list[DriverStat]:
    """
    Group deliveries per driver and rank by loaded tonnage.

    Args:
        deliveries: Flat delivery records
        unknown_driver_id: Bucket id for deliveries without a driver
        unknown_driver_label: Name used when a delivery has no driver name

    Returns:
        DriverStat list sorted by total_tonnage descending (stable on ties)
    """
    unknown_id = unknown_driver_id or settings.unknown_driver_id
    unknown_label = unknown_driver_label or settings.unknown_driver_label

    buckets: dict[str, DriverStat] = {}
    for delivery in deliveries or []:
        driver_id = delivery.driver_id or unknown_id
        stat = buckets.get(driver_id)
        if stat is None:
            stat = DriverStat(
                driver_id=driver_id,
                driver_name=delivery.driver_name or unknown_label,
                truck_plate=NO_PLATE,
            )
            buckets[driver_id] = stat
        stat.total_tonnage += delivery.tonnage_loaded or 0
        stat.trip_count += 1
        stat.deliveries.append(delivery)

    for stat in buckets.values():
        stat.deliveries = sort_most_recent_first(stat.deliveries, lambda d: d.delivery_date)
        plates = [d.truck_plate for d in stat.deliveries if d.truck_plate]
        if plates:
            stat.truck_plate = plates[0]

    ranked = sorted(buckets.values(), key=lambda s: s.total_tonnage, reverse=True)
    logger.debug(f"Rolled up {len(ranked)} driver bucket(s)")
    return ranked


def build_driver_dashboard(stat: DriverStat) -> DriverDashboard:
    """
    Compute the per-driver detail figures.

    Average is guarded against a zero trip count; the maximum of an empty
    history is 0.
    """
    distribution: dict[str, float] = {}
    for delivery in stat.deliveries:
        region = delivery.region_name or UNKNOWN_REGION
        distribution[region] = distribution.get(region, 0) + (delivery.tonnage_loaded or 0)

    chronological = sorted(
        (d for d in stat.deliveries if d.delivery_date is not None),
        key=lambda d: d.delivery_date,
    )
    chronological += [d for d in stat.deliveries if d.delivery_date is None]

    progression = [
        TripPoint(
            index=i + 1,
            tonnage=d.tonnage_loaded or 0,
            date=d.delivery_date.date().isoformat() if d.delivery_date else None,
        )
        for i, d in enumerate(chronological)
    ]

    return DriverDashboard(
        driver=stat,
        average_tonnage=stat.total_tonnage / (stat.trip_count or 1),
        max_tonnage=max([d.tonnage_loaded or 0 for d in stat.deliveries] + [0]),
        region_distribution=[
            TonnageShare(name=name, value=value) for name, value in distribution.items()
        ],
        progression=progression,
    )
