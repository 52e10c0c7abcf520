"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from tracker.infrastructure.supabase_client import (
    SupabaseClient,
    get_supabase_client,
)
from tracker.services.application.campaign_service import CampaignService


def get_campaign_service(
    client: Annotated[SupabaseClient, Depends(get_supabase_client)],
) -> CampaignService:
    """
    Dependency factory for CampaignService.

    Args:
        client: Supabase client (injected)

    Returns:
        CampaignService instance
    """
    return CampaignService(client=client)


# Type aliases for cleaner route signatures
CampaignServiceDep = Annotated[CampaignService, Depends(get_campaign_service)]
