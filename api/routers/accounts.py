"""
Accounts API Endpoints.

Candidate recipients for Authentication Key assignment.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import admin_client
from api.models import AccountListResponse, AccountResponse
from repositories.client import AdminApiClient
from services.account_search_service import load_candidate_accounts, search_accounts

router = APIRouter()


@router.get(
    "/accounts",
    response_model=AccountListResponse,
    summary="List Candidate Accounts",
    description="Registered accounts, optionally searched by name, email, or phone (at least 2 characters)."
)
async def get_accounts(
    search: Optional[str] = Query(None, description="Search text, minimum 2 characters"),
    limit: int = Query(1000, ge=1, le=1000),
    client: AdminApiClient = Depends(admin_client),
):
    if search is not None:
        lookup = await search_accounts(client, search)
    else:
        lookup = await load_candidate_accounts(client, limit=limit)

    return AccountListResponse(
        items=[
            AccountResponse(
                id=account.account_id,
                name=account.name,
                email=account.email,
                phone=account.phone,
                kyc_status=account.kyc_status,
            )
            for account in lookup.accounts
        ],
        notice=lookup.notice,
    )
