"""
Supabase REST endpoint constants.

PostgREST exposes every table under ``/rest/v1/<table>``. Embedded joins
are expressed in the ``select`` query parameter.
"""


class SupabaseTables:
    """Table paths relative to the REST base URL."""

    REST_PREFIX = "/rest/v1"

    REGIONS = "regions"
    DEPARTMENTS = "departments"
    COMMUNES = "communes"
    OPERATORS = "operators"
    ALLOCATIONS = "allocations"
    DELIVERIES = "deliveries"

    @classmethod
    def path(cls, table: str) -> str:
        """
        Get the REST path of a table.

        Args:
            table: Table name

        Returns:
            Path relative to the Supabase project URL
        """
        return f"{cls.REST_PREFIX}/{table}"


class SupabaseSelects:
    """``select`` expressions, including the embedded joins of the views."""

    REGIONS = "id,name,code"
    DEPARTMENTS = "id,region_id,name,code"
    COMMUNES = "id,department_id,name,code"
    OPERATORS = "id,name,commune_id,operateur_coop_gie,contact_info"
    ALLOCATIONS = (
        "id,allocation_key,operator_id,region_id,department_id,commune_id,"
        "target_tonnage,project_id,responsible_name"
    )
    DELIVERIES_VIEW = (
        "*,"
        "trucks:truck_id(plate_number),"
        "drivers:driver_id(name),"
        "allocations:allocation_id("
        "project_id,operators(name),regions(name),communes(name))"
    )


class APIConstants:
    """General API configuration constants."""

    CONTENT_TYPE_JSON = "application/json"

    # Rows requested per page (``limit``/``offset`` paging)
    DEFAULT_PAGE_SIZE = 1000

    # Stable paging order
    DEFAULT_ORDER = "id.asc"
