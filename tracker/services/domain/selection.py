"""
Domain service: Drill-down selection over the hierarchy.

The selection is a chain region -> department -> commune -> operator ->
allocation. Selecting a node at one level clears every deeper level, so a
stale child id can never outlive a change of its ancestor. The driver
selection of the performance panel lives alongside but outside the chain.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence
import logging

from tracker.domain.models import (
    AllocationNode,
    CommuneNode,
    DepartmentNode,
    DriverStat,
    OperatorNode,
    RegionNode,
)
from tracker.services.domain.stats import Level, children_of

logger = logging.getLogger(__name__)

CHAIN: tuple[Level, ...] = (
    Level.REGION,
    Level.DEPARTMENT,
    Level.COMMUNE,
    Level.OPERATOR,
    Level.ALLOCATION,
)


@dataclass
class SelectedPath:
    """Nodes matched by a selection, ``None`` from the first miss on."""
    region: Optional[RegionNode] = None
    department: Optional[DepartmentNode] = None
    commune: Optional[CommuneNode] = None
    operator: Optional[OperatorNode] = None
    allocation: Optional[AllocationNode] = None


@dataclass
class DrillDownSelection:
    region: Optional[str] = None
    department: Optional[str] = None
    commune: Optional[str] = None
    operator: Optional[str] = None
    allocation: Optional[str] = None
    driver: Optional[str] = None
    _auto_selected: bool = field(default=False, repr=False, init=False)

    def get(self, level: Level) -> Optional[str]:
        return getattr(self, _attr(level))

    def select(self, level: Level, node_id: Optional[str]) -> None:
        """Select a node at ``level`` and clear every deeper level."""
        level = Level(level)
        depth = CHAIN.index(level)
        setattr(self, _attr(level), node_id)
        for deeper in CHAIN[depth + 1:]:
            setattr(self, _attr(deeper), None)

    def select_driver(self, driver_id: Optional[str]) -> None:
        self.driver = driver_id

    def reset(self) -> None:
        """Clear everything. No auto-selection follows an explicit reset."""
        for level in CHAIN:
            setattr(self, _attr(level), None)
        self.driver = None
        self._auto_selected = True

    def is_empty(self) -> bool:
        return self.driver is None and all(self.get(level) is None for level in CHAIN)

    def on_data_loaded(
        self,
        regions: Sequence[RegionNode],
        drivers: Sequence[DriverStat] = (),
    ) -> None:
        """
        Start a fresh load: clear state, then select the first region by name
        and the top-ranked driver. Fires once per load.
        """
        for level in CHAIN:
            setattr(self, _attr(level), None)
        self.driver = None
        self._auto_selected = False
        self.auto_select(regions, drivers)

    def auto_select(
        self,
        regions: Sequence[RegionNode],
        drivers: Sequence[DriverStat] = (),
    ) -> bool:
        if self._auto_selected:
            return False
        self._auto_selected = True
        if regions and self.region is None:
            first = min(regions, key=lambda r: r.name.casefold())
            self.select(Level.REGION, first.id)
        if drivers and self.driver is None:
            self.driver = drivers[0].driver_id
        logger.debug(f"Auto-selected region={self.region} driver={self.driver}")
        return True

    def resolve(self, regions: Iterable[RegionNode]) -> SelectedPath:
        """
        Match the selected ids against a hierarchy.

        Walking stops at the first id that is unset or not a child of the
        previous match; deeper ids are ignored.
        """
        path = SelectedPath()
        candidates = list(regions or [])
        for level in CHAIN:
            node_id = self.get(level)
            if node_id is None:
                break
            node = next((c for c in candidates if c.id == node_id), None)
            if node is None:
                logger.debug(f"Selected {level.value} {node_id} not found, stopping")
                break
            setattr(path, _attr(level), node)
            candidates = children_of(node, level)
        return path


def _attr(level: Level) -> str:
    level = Level(level)
    return "department" if level is Level.DEPARTMENT else level.value
