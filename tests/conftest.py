"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Flat campaign rows (regions ... deliveries)
- A built hierarchy
- Mock Supabase client
- FastAPI test client
"""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from tracker.main import app
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
from tracker.infrastructure.supabase_client import SupabaseClient


# ============================================================
# Flat Row Fixtures
# ============================================================

@pytest.fixture
def sample_regions() -> list[Region]:
    return [
        Region(id="reg_2", name="Thiès", code="TH"),
        Region(id="reg_3", name="Kaolack", code="KL"),
    ]


@pytest.fixture
def sample_departments() -> list[Department]:
    return [
        Department(id="dept_2", region_id="reg_2", name="Thiès"),
        Department(id="dept_3", region_id="reg_2", name="Mbour"),
        Department(id="dept_4", region_id="reg_3", name="Kaolack"),
    ]


@pytest.fixture
def sample_communes() -> list[Commune]:
    return [
        Commune(id="com_1", department_id="dept_2", name="Thiès Nord"),
        Commune(id="com_2", department_id="dept_2", name="Fandène"),
        Commune(id="com_4", department_id="dept_4", name="Kaolack"),
    ]


@pytest.fixture
def sample_operators() -> list[Operator]:
    return [
        Operator(id="op_1", name="GIE And Suxali", commune_id="com_1", is_coop=True),
        Operator(id="op_2", name="Moussa Diop", commune_id="com_2", is_coop=False),
        Operator(id="op_3", name="Coopérative Saloum", commune_id="com_4", is_coop=True),
    ]


@pytest.fixture
def sample_allocations() -> list[AllocationRecord]:
    return [
        AllocationRecord(
            id="all_1", allocation_key="PH1-TH-001", operator_id="op_2",
            target_tonnage=500, project_id="proj_1",
        ),
        AllocationRecord(
            id="all_2", allocation_key="PH1-KL-002", operator_id="op_3",
            target_tonnage=1000, project_id="proj_1",
        ),
        AllocationRecord(
            id="all_3", allocation_key="PH2-TH-003", operator_id="op_1",
            target_tonnage=200, project_id="proj_2",
        ),
    ]


@pytest.fixture
def sample_deliveries() -> list[DeliveryRecord]:
    return [
        DeliveryRecord(
            id="del_1", allocation_id="all_1", bl_number="BL250001",
            driver_id="dr_1", driver_name="Amadou Fall", truck_plate="DK-2045-BB",
            tonnage_loaded=40, delivery_date=datetime(2023, 10, 5, 9),
            region_name="Thiès", project_id="proj_1",
        ),
        DeliveryRecord(
            id="del_2", allocation_id="all_1", bl_number="BL250002",
            driver_id="dr_2", driver_name="Cheikh Ndiaye", truck_plate="TH-9921-AA",
            tonnage_loaded=50, delivery_date=datetime(2023, 10, 6, 10),
            region_name="Thiès", project_id="proj_1",
        ),
        DeliveryRecord(
            id="del_3", allocation_id="all_3", bl_number="BL250003",
            driver_id="dr_1", driver_name="Amadou Fall", truck_plate="DK-2045-BB",
            tonnage_loaded=30, delivery_date=datetime(2023, 11, 2, 8),
            region_name="Thiès", project_id="proj_2",
        ),
    ]


# ============================================================
# Hierarchy Fixtures
# ============================================================

@pytest.fixture
def thies_hierarchy() -> list[RegionNode]:
    """Thiès -> Thiès -> Fandène -> Moussa Diop -> one allocation, two deliveries."""
    return [
        RegionNode(id="reg_2", name="Thiès", departments=[
            DepartmentNode(id="dept_2", name="Thiès", communes=[
                CommuneNode(id="com_2", name="Fandène", operators=[
                    OperatorNode(id="op_2", name="Moussa Diop", allocations=[
                        AllocationNode(
                            id="all_1",
                            allocation_key="PH1-TH-001",
                            target=500,
                            delivered=40,
                            deliveries=[
                                DeliveryNode(id="del_1", bl_number="BL1", tonnage=40,
                                             driver_id="dr_1", driver_name="Amadou"),
                                DeliveryNode(id="del_2", bl_number="BL2", tonnage=10,
                                             driver_id="dr_1", driver_name="Amadou"),
                            ],
                        ),
                    ]),
                ]),
            ]),
        ]),
    ]


# ============================================================
# Mock API Client Fixtures
# ============================================================

@pytest.fixture
def mock_supabase_client(
    sample_regions,
    sample_departments,
    sample_communes,
    sample_operators,
    sample_allocations,
    sample_deliveries,
):
    """Create a mock Supabase client serving the sample rows."""
    mock_client = AsyncMock(spec=SupabaseClient)
    mock_client.get_regions.return_value = sample_regions
    mock_client.get_departments.return_value = sample_departments
    mock_client.get_communes.return_value = sample_communes
    mock_client.get_operators.return_value = sample_operators
    mock_client.get_allocations.return_value = sample_allocations
    mock_client.get_deliveries.return_value = sample_deliveries
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
