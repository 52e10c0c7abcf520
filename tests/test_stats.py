"""
Unit tests for the tonnage roll-up.

Tests cover:
- Leaf totals at every level
- Immediate-child count
- Zero-target safety
- Empty input
- Region performance and over-delivery alerts
"""
import math
import pytest

from tracker.domain.models import (
    AllocationNode,
    CommuneNode,
    DeliveryNode,
    DepartmentNode,
    NodeStats,
    OperatorNode,
    RegionNode,
)
from tracker.services.domain.stats import (
    Level,
    ProgressStatus,
    calculate_node_stats,
    completion_rate,
    count_over_delivered,
    dashboard_summary,
    delivery_list_stats,
    progress_status,
    region_performance,
    zone_stats,
)


def make_operator(op_id: str, allocations: list[tuple[float, float]]) -> OperatorNode:
    return OperatorNode(
        id=op_id,
        name=f"Operator {op_id}",
        allocations=[
            AllocationNode(id=f"{op_id}-a{i}", allocation_key=f"K{i}", target=t, delivered=d)
            for i, (t, d) in enumerate(allocations)
        ],
    )


@pytest.fixture
def wide_region() -> RegionNode:
    """Region with 3 departments holding 50 allocations in total."""
    departments = []
    for d in range(3):
        operators = [
            make_operator(f"d{d}-o{o}", [(10, 4)] * (15 if d == 0 else 5))
            for o in range(2)
        ]
        communes = [CommuneNode(id=f"d{d}-c0", name="Commune", operators=operators)]
        departments.append(DepartmentNode(id=f"d{d}", name=f"Dept {d}", communes=communes))
    return RegionNode(id="r", name="Region", departments=departments)


# ============================================================
# Roll-up Tests
# ============================================================

class TestCalculateNodeStats:
    """Tests for calculate_node_stats."""

    def test_region_totals_sum_every_allocation(self, wide_region):
        """Region totals should equal the sum over all allocation leaves."""
        stats = calculate_node_stats(wide_region, Level.REGION)

        assert stats.total_target == 50 * 10
        assert stats.total_delivered == 50 * 4

    def test_region_count_is_immediate_children(self, wide_region):
        """A region with 3 departments has count 3 whatever lies below."""
        stats = calculate_node_stats(wide_region, Level.REGION)

        assert stats.count == 3

    def test_operator_count_is_allocation_count(self):
        operator = make_operator("o", [(1, 0)] * 5)

        stats = calculate_node_stats(operator, Level.OPERATOR)

        assert stats.count == 5
        assert stats.total_target == 5

    def test_allocation_count_is_delivery_count(self):
        allocation = AllocationNode(
            id="a",
            target=100,
            delivered=30,
            deliveries=[DeliveryNode(id="d1", tonnage=10), DeliveryNode(id="d2", tonnage=20)],
        )

        stats = calculate_node_stats(allocation, Level.ALLOCATION)

        assert stats.count == 2
        assert stats.total_target == 100
        assert stats.total_delivered == 30

    def test_totals_consistent_across_levels(self, wide_region):
        """Each level's totals equal the sum of its children's totals."""
        region_stats = calculate_node_stats(wide_region, Level.REGION)
        dept_totals = [
            calculate_node_stats(d, Level.DEPARTMENT).total_target
            for d in wide_region.departments
        ]

        assert sum(dept_totals) == region_stats.total_target

    def test_accepts_plain_level_string(self, wide_region):
        stats = calculate_node_stats(wide_region.departments[0], "dept")

        assert stats.count == 1

    def test_missing_children_counted_as_empty(self):
        """A None child collection should roll up to zeros."""
        commune = CommuneNode(id="c", name="Empty", operators=None)

        stats = calculate_node_stats(commune, Level.COMMUNE)

        assert stats == NodeStats(count=0, total_target=0, total_delivered=0)

    def test_unknown_level_raises(self, wide_region):
        with pytest.raises(ValueError):
            calculate_node_stats(wide_region, "country")


# ============================================================
# Zero Safety Tests
# ============================================================

class TestCompletionRate:
    """Tests for the guarded completion percentage."""

    def test_regular_rate(self):
        assert completion_rate(40, 500) == pytest.approx(8.0)

    def test_zero_target_gives_zero(self):
        """Zero target should give 0, never NaN or Infinity."""
        rate = completion_rate(40, 0)

        assert rate == 0
        assert math.isfinite(rate)

    def test_none_values_treated_as_zero(self):
        assert completion_rate(None, None) == 0

    def test_node_stats_rate_zero_target(self):
        stats = NodeStats(count=1, total_target=0, total_delivered=25)

        assert stats.completion_rate == 0

    def test_rate_included_in_serialization(self):
        data = NodeStats(count=1, total_target=200, total_delivered=50).model_dump()

        assert data["completion_rate"] == pytest.approx(25.0)

    def test_zero_target_allocation_through_stats(self):
        allocation = AllocationNode(id="a", target=0, delivered=10)

        stats = calculate_node_stats(allocation, Level.ALLOCATION)

        assert stats.completion_rate == 0


class TestProgressStatus:
    """Tests for allocation badge status."""

    @pytest.mark.parametrize("rate,expected", [
        (0, ProgressStatus.PENDING),
        (0.5, ProgressStatus.IN_PROGRESS),
        (99.9, ProgressStatus.IN_PROGRESS),
        (100, ProgressStatus.COMPLETE),
        (140, ProgressStatus.COMPLETE),
    ])
    def test_thresholds(self, rate, expected):
        assert progress_status(rate) is expected


# ============================================================
# Empty Input Tests
# ============================================================

class TestEmptyInput:
    """Tests for empty hierarchies."""

    def test_empty_region_list(self):
        stats = zone_stats([])

        assert stats.count == 0
        assert stats.total_target == 0
        assert stats.total_delivered == 0

    def test_region_without_departments(self):
        region = RegionNode(id="r", name="Louga", departments=[])

        stats = calculate_node_stats(region, Level.REGION)

        assert stats.model_dump() == {
            "count": 0,
            "total_target": 0,
            "total_delivered": 0,
            "completion_rate": 0,
        }

    def test_empty_delivery_list(self):
        assert delivery_list_stats([]).count == 0

    def test_empty_performance(self):
        assert region_performance([]) == []
        assert count_over_delivered([]) == 0


# ============================================================
# Zone / Dashboard Tests
# ============================================================

class TestZoneStats:
    """Tests for the top column and dashboard figures."""

    def test_zone_stats_counts_regions(self, thies_hierarchy):
        stats = zone_stats(thies_hierarchy + [RegionNode(id="r9", name="Louga")])

        assert stats.count == 2
        assert stats.total_target == 500
        assert stats.total_delivered == 40

    def test_delivery_list_stats(self):
        deliveries = [DeliveryNode(id="1", tonnage=40), DeliveryNode(id="2", tonnage=None)]

        stats = delivery_list_stats(deliveries)

        assert stats.count == 2
        assert stats.total_target == 0
        assert stats.total_delivered == 40

    def test_region_performance(self, thies_hierarchy):
        performance = region_performance(thies_hierarchy)

        assert len(performance) == 1
        assert performance[0].region_name == "Thiès"
        assert performance[0].target_tonnage == 500
        assert performance[0].delivery_count == 2
        assert performance[0].completion_rate == pytest.approx(8.0)

    def test_count_over_delivered(self):
        region = RegionNode(id="r", name="R", departments=[
            DepartmentNode(id="d", name="D", communes=[
                CommuneNode(id="c", name="C", operators=[
                    make_operator("o", [(100, 120), (100, 100), (0, 5)]),
                ]),
            ]),
        ])

        assert count_over_delivered([region]) == 2

    def test_dashboard_summary(self, thies_hierarchy):
        summary = dashboard_summary(thies_hierarchy)

        assert summary.total_target == 500
        assert summary.total_delivered == 40
        assert summary.completion_rate == pytest.approx(8.0)
        assert summary.alerts == 0

    def test_dashboard_summary_empty(self):
        summary = dashboard_summary([])

        assert summary.completion_rate == 0
        assert summary.alerts == 0


# ============================================================
# End-to-end Scenario
# ============================================================

class TestThiesScenario:
    """Single chain Thiès -> Fandène -> Moussa Diop."""

    def test_region_stats(self, thies_hierarchy):
        stats = calculate_node_stats(thies_hierarchy[0], Level.REGION)

        assert stats.count == 1
        assert stats.total_target == 500
        assert stats.total_delivered == 40

    def test_allocation_completion(self, thies_hierarchy):
        allocation = (
            thies_hierarchy[0].departments[0].communes[0].operators[0].allocations[0]
        )

        stats = calculate_node_stats(allocation, Level.ALLOCATION)

        assert stats.completion_rate == pytest.approx(8.0)
        assert stats.count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
