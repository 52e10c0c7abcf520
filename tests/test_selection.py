"""
Unit tests for drill-down selection state.
"""
import pytest

from tracker.domain.models import DriverStat, RegionNode
from tracker.services.domain.selection import DrillDownSelection
from tracker.services.domain.stats import Level


@pytest.fixture
def deep_selection() -> DrillDownSelection:
    selection = DrillDownSelection()
    selection.select(Level.REGION, "R1")
    selection.select(Level.DEPARTMENT, "D1")
    selection.select(Level.COMMUNE, "C1")
    selection.select(Level.OPERATOR, "O1")
    selection.select(Level.ALLOCATION, "AL3")
    return selection


# ============================================================
# Cascade-clear Tests
# ============================================================

class TestSelect:
    """Tests for select and its cascade."""

    def test_selecting_commune_clears_descendants(self, deep_selection):
        deep_selection.select(Level.COMMUNE, "C2")

        assert deep_selection.region == "R1"
        assert deep_selection.department == "D1"
        assert deep_selection.commune == "C2"
        assert deep_selection.operator is None
        assert deep_selection.allocation is None

    def test_selecting_region_clears_everything_below(self, deep_selection):
        deep_selection.select(Level.REGION, "R2")

        assert deep_selection.region == "R2"
        assert deep_selection.department is None
        assert deep_selection.commune is None

    def test_deselect_level(self, deep_selection):
        deep_selection.select(Level.DEPARTMENT, None)

        assert deep_selection.region == "R1"
        assert deep_selection.department is None
        assert deep_selection.allocation is None

    def test_select_with_level_string(self):
        selection = DrillDownSelection()

        selection.select("dept", "D1")

        assert selection.get(Level.DEPARTMENT) == "D1"

    def test_driver_outside_chain(self, deep_selection):
        deep_selection.select_driver("dr_1")
        deep_selection.select(Level.REGION, "R2")

        assert deep_selection.driver == "dr_1"


# ============================================================
# Auto-select / Reset Tests
# ============================================================

class TestAutoSelect:
    """Tests for the first-load auto-selection."""

    @pytest.fixture
    def regions(self):
        return [RegionNode(id="r_th", name="Thiès"), RegionNode(id="r_ka", name="kaolack")]

    @pytest.fixture
    def drivers(self):
        return [
            DriverStat(driver_id="dr_1", driver_name="Amadou", truck_plate="-", total_tonnage=90),
            DriverStat(driver_id="dr_2", driver_name="Cheikh", truck_plate="-", total_tonnage=10),
        ]

    def test_selects_first_region_by_name_and_top_driver(self, regions, drivers):
        selection = DrillDownSelection()

        selection.on_data_loaded(regions, drivers)

        assert selection.region == "r_ka"
        assert selection.driver == "dr_1"

    def test_fires_once_per_load(self, regions, drivers):
        selection = DrillDownSelection()
        selection.on_data_loaded(regions, drivers)
        selection.select(Level.REGION, None)

        fired = selection.auto_select(regions, drivers)

        assert fired is False
        assert selection.region is None

    def test_reset_stays_empty(self, regions, drivers):
        selection = DrillDownSelection()
        selection.on_data_loaded(regions, drivers)

        selection.reset()
        selection.auto_select(regions, drivers)

        assert selection.is_empty()

    def test_new_load_clears_previous_state(self, regions, deep_selection):
        deep_selection.on_data_loaded(regions)

        assert deep_selection.region == "r_ka"
        assert deep_selection.department is None
        assert deep_selection.allocation is None

    def test_empty_data(self):
        selection = DrillDownSelection()

        selection.on_data_loaded([], [])

        assert selection.is_empty()


# ============================================================
# Resolve Tests
# ============================================================

class TestResolve:
    """Tests for matching a selection against a hierarchy."""

    def test_full_path(self, thies_hierarchy):
        selection = DrillDownSelection()
        for level, node_id in [
            (Level.REGION, "reg_2"),
            (Level.DEPARTMENT, "dept_2"),
            (Level.COMMUNE, "com_2"),
            (Level.OPERATOR, "op_2"),
            (Level.ALLOCATION, "all_1"),
        ]:
            selection.select(level, node_id)

        path = selection.resolve(thies_hierarchy)

        assert path.region.name == "Thiès"
        assert path.commune.name == "Fandène"
        assert path.operator.name == "Moussa Diop"
        assert path.allocation.target == 500

    def test_stops_at_first_unknown_id(self, thies_hierarchy):
        selection = DrillDownSelection(region="reg_2", department="nope", commune="com_2")

        path = selection.resolve(thies_hierarchy)

        assert path.region is not None
        assert path.department is None
        assert path.commune is None

    def test_child_of_other_parent_not_matched(self, thies_hierarchy):
        selection = DrillDownSelection(region="reg_9", department="dept_2")

        path = selection.resolve(thies_hierarchy)

        assert path.region is None
        assert path.department is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
