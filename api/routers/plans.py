"""
Plans API Endpoints.

Plans an operator can generate or assign Authentication Keys for.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import admin_client
from api.models import PlanResponse
from repositories.client import AdminApiClient, RemoteCallError
from repositories.plan_repository import list_plans

router = APIRouter()


@router.get(
    "/plans",
    response_model=List[PlanResponse],
    summary="List Plans",
)
async def get_plans(
    is_active: Optional[bool] = Query(None, description="Only active or inactive plans"),
    client: AdminApiClient = Depends(admin_client),
):
    try:
        plans = await list_plans(client, is_active=is_active)
    except RemoteCallError as e:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to load plans: {e.message}"
        )

    return [
        PlanResponse(id=plan.plan_id, name=plan.name, amount=plan.amount, is_active=plan.is_active)
        for plan in plans
    ]
