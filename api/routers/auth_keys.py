"""
Authentication Key API Endpoints.

Endpoints for browsing key inventory, generating keys, and assigning keys to
registered accounts or email addresses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import admin_client, validation_http_error
from api.models import (
    AssignKeyRequest,
    AssignKeyResponse,
    AuthKeyListResponse,
    AuthKeyResponse,
    AvailableKeysResponse,
    BulkAssignRequest,
    BulkAssignResponse,
    GenerateKeysRequest,
    GenerateKeysResponse,
    InventoryStatsResponse,
    OutcomeResponse,
)
from domain.admission import ValidationError, validate_email_syntax
from domain.auth_key import AuthKeyStatus
from domain.recipient import Recipient
from repositories.auth_key_repository import list_auth_keys
from repositories.client import AdminApiClient, RemoteCallError
from services.bulk_assignment_service import BulkAssignmentSession
from services.inventory_stats_service import InventoryStatsLoader
from services.key_generation_service import generate_keys
from services.key_pool_service import KeyPool
from services.single_assignment_service import (
    AssignmentState,
    SingleAssignmentFlow,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PAGE_SIZE = 20


@router.get(
    "/auth-keys",
    response_model=AuthKeyListResponse,
    summary="List Authentication Keys",
    description="Paginated key list with optional plan and status filters."
)
async def get_auth_keys(
    page: int = Query(1, ge=1),
    limit: int = Query(PAGE_SIZE, ge=1, le=1000),
    plan_id: Optional[str] = Query(None, description="Filter by plan"),
    status: Optional[AuthKeyStatus] = Query(None, description="Filter by status"),
    client: AdminApiClient = Depends(admin_client),
):
    """
    List keys page by page.

    A failing admin service yields an empty page with a `notice` instead of an
    error, so the rest of the console keeps working.
    """
    try:
        result = await list_auth_keys(client, page=page, limit=limit, plan_id=plan_id, status=status)
    except RemoteCallError as e:
        logger.warning("Failed to load Authentication Keys: %s", e)
        return AuthKeyListResponse(items=[], page=page, total_pages=1, notice="Failed to load Authentication Keys")

    return AuthKeyListResponse(
        items=[AuthKeyResponse.from_domain(key) for key in result.keys],
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/auth-keys/stats",
    response_model=InventoryStatsResponse,
    summary="Authentication Key Statistics",
)
async def get_auth_key_statistics(
    plan_id: Optional[str] = Query(None, description="Restrict to one plan"),
    client: AdminApiClient = Depends(admin_client),
):
    """Overall and per-plan counts as reported by the admin service."""
    loader = InventoryStatsLoader(client)
    view = await loader.refresh(plan_id)
    return InventoryStatsResponse.from_domain(view, loader.notice)


@router.get(
    "/auth-keys/available",
    response_model=AvailableKeysResponse,
    summary="Available Keys For A Plan",
)
async def get_available_keys(
    plan_id: str = Query(..., description="Plan to load"),
    client: AdminApiClient = Depends(admin_client),
):
    """ACTIVE keys of the plan that have not been distributed yet."""
    pool = KeyPool(client)
    keys = await pool.load_available(plan_id)
    return AvailableKeysResponse(
        plan_id=plan_id,
        available_count=len(keys),
        items=[AuthKeyResponse.from_domain(key) for key in keys],
        notice=pool.notice,
    )


@router.post(
    "/auth-keys/generate",
    response_model=GenerateKeysResponse,
    summary="Generate Authentication Keys",
    description="Generate 1-1000 keys for a plan."
)
async def post_generate_keys(request: GenerateKeysRequest, client: AdminApiClient = Depends(admin_client)):
    try:
        result = await generate_keys(client, request.plan_id, request.quantity, request.distribute_to_account_id)
    except ValidationError as e:
        raise validation_http_error(e)

    return GenerateKeysResponse(
        success=result.success,
        plan_id=result.plan_id,
        quantity=result.quantity,
        message=result.message,
    )


@router.post(
    "/auth-keys/bulk-assign",
    response_model=BulkAssignResponse,
    summary="Bulk Assign Authentication Keys",
    description="Assign one available key of a plan to each registered account and email."
)
async def post_bulk_assign(request: BulkAssignRequest, client: AdminApiClient = Depends(admin_client)):
    """
    Assign keys to many recipients.

    **Process:**
    1. Loads the plan's available keys
    2. Builds the recipient set (accounts first, then emails), rejecting
       invalid or duplicate emails and anything beyond the available keys
    3. Distributes keys one at a time, continuing past individual failures
    4. Returns per-recipient outcomes, the summary, and refreshed statistics

    Guard failures return 422 and no key is distributed.
    """
    session = BulkAssignmentSession(client)
    await session.select_plan(request.plan_id)
    if session.notice:
        raise HTTPException(status_code=502, detail=session.notice)

    try:
        for account_id in request.account_ids:
            session.recipients.add_account(account_id)
        for email in request.emails:
            session.recipients.add_email(email)
        result = await session.submit()
    except ValidationError as e:
        raise validation_http_error(e)

    return BulkAssignResponse(
        succeeded_count=result.summary.succeeded_count,
        failed_count=result.summary.failed_count,
        failed_email_addresses=list(result.summary.failed_email_addresses),
        result=result.summary.kind.value,
        tone=result.summary.tone,
        messages=result.summary.messages(),
        outcomes=[OutcomeResponse.from_domain(outcome) for outcome in result.outcomes],
        remaining_available=len(result.remaining_keys),
        stats=InventoryStatsResponse.from_domain(result.stats, session.stats.notice),
    )


@router.post(
    "/auth-keys/{key_id}/assign",
    response_model=AssignKeyResponse,
    summary="Assign A Single Authentication Key",
)
async def post_assign_key(key_id: str, request: AssignKeyRequest, client: AdminApiClient = Depends(admin_client)):
    """
    Assign one key to a registered account or an email address.

    Account assignments need `confirmed: true`; without it the response has
    state PENDING_CONFIRMATION and nothing is sent. Email assignments run
    immediately once the address is valid.
    """
    if bool(request.account_id) == bool(request.email):
        raise HTTPException(status_code=400, detail="Provide exactly one of account_id or email")

    if request.email:
        try:
            validate_email_syntax(request.email)
        except ValidationError as e:
            raise validation_http_error(e)

    pool = KeyPool(client)
    await pool.load_available(request.plan_id)
    if pool.notice:
        raise HTTPException(status_code=502, detail=pool.notice)

    key = next((k for k in pool.keys if k.key_id == key_id), None)
    if key is None:
        raise HTTPException(status_code=409, detail="Authentication Key is not available for assignment")

    flow = SingleAssignmentFlow(client, key)

    try:
        if request.account_id:
            pending = flow.choose_account(Recipient.registered(request.account_id))
            if not request.confirmed:
                return AssignKeyResponse(
                    success=False,
                    state=flow.state.value,
                    key_id=key_id,
                    recipient=pending.label,
                    message=f"Confirm assignment of {key.code} to {pending.label}",
                )
            outcome = await flow.confirm()
        else:
            outcome = await flow.submit_email(request.email)
    except ValidationError as e:
        raise validation_http_error(e)

    return AssignKeyResponse(
        success=flow.state is AssignmentState.SUCCEEDED,
        state=flow.state.value,
        key_id=key_id,
        recipient=outcome.recipient.label,
        message=flow.message,
    )
