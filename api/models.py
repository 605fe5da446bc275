"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.auth_key import AuthenticationKey
from domain.inventory_stats import InventoryStats, InventoryStatsView
from domain.outcome import AllocationOutcome


# ============================================================================
# Authentication Key Models
# ============================================================================

class AuthKeyResponse(BaseModel):
    """Single Authentication Key in API responses."""
    id: str
    code: str
    plan_id: str
    plan_name: Optional[str] = None
    status: str  # ACTIVE, USED, EXPIRED, CANCELLED
    distributed_to: Optional[str] = None
    recipient_label: Optional[str] = None
    used_by: Optional[str] = None
    used_by_label: Optional[str] = None
    used_at: Optional[datetime] = None
    created_at: datetime
    assignable: bool

    @classmethod
    def from_domain(cls, key: AuthenticationKey) -> "AuthKeyResponse":
        return cls(
            id=key.key_id,
            code=key.code,
            plan_id=key.plan_id,
            plan_name=key.plan_name,
            status=key.status.value,
            distributed_to=key.distributed_to,
            recipient_label=key.recipient_label,
            used_by=key.used_by,
            used_by_label=key.used_by_label,
            used_at=key.used_at,
            created_at=key.created_at,
            assignable=key.is_assignable,
        )


class AuthKeyListResponse(BaseModel):
    """Response for the paginated key list."""
    items: List[AuthKeyResponse]
    page: int
    total_pages: int
    notice: Optional[str] = None


class AvailableKeysResponse(BaseModel):
    """KeyPool for one plan."""
    plan_id: str
    available_count: int
    items: List[AuthKeyResponse]
    notice: Optional[str] = None


class GenerateKeysRequest(BaseModel):
    """Request to generate Authentication Keys for a plan."""
    plan_id: str = Field(..., description="Plan the keys unlock")
    quantity: int = Field(..., description="Number of keys to generate (1-1000)")
    distribute_to_account_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "plan_id": "plan-basic",
                "quantity": 50
            }
        }


class GenerateKeysResponse(BaseModel):
    success: bool
    plan_id: str
    quantity: int
    message: str


# ============================================================================
# Statistics Models
# ============================================================================

class StatsRow(BaseModel):
    total: int
    active: int
    used: int
    distributed: int
    not_distributed: int
    remaining: int

    @classmethod
    def from_domain(cls, stats: InventoryStats) -> "StatsRow":
        return cls(
            total=stats.total,
            active=stats.active,
            used=stats.used,
            distributed=stats.distributed,
            not_distributed=stats.not_distributed,
            remaining=stats.remaining,
        )


class PlanStatsRow(StatsRow):
    plan_id: str
    plan_name: str


class InventoryStatsResponse(BaseModel):
    overall: StatsRow
    overall_is_authoritative: bool
    by_plan: List[PlanStatsRow]
    notice: Optional[str] = None

    @classmethod
    def from_domain(cls, view: InventoryStatsView, notice: Optional[str] = None) -> "InventoryStatsResponse":
        return cls(
            overall=StatsRow.from_domain(view.overall),
            overall_is_authoritative=view.overall_is_authoritative,
            by_plan=[
                PlanStatsRow(
                    plan_id=row.plan_id,
                    plan_name=row.plan_name,
                    **StatsRow.from_domain(row.stats).model_dump(),
                )
                for row in view.by_plan
            ],
            notice=notice,
        )


# ============================================================================
# Assignment Models
# ============================================================================

class BulkAssignRequest(BaseModel):
    """Request to assign one key of a plan to each recipient."""
    plan_id: str
    account_ids: List[str] = Field(default_factory=list, description="Registered accounts, in selection order")
    emails: List[str] = Field(default_factory=list, description="Manual email recipients, in addition order")

    class Config:
        json_schema_extra = {
            "example": {
                "plan_id": "plan-basic",
                "account_ids": ["u-1", "u-2"],
                "emails": ["ops@example.com"]
            }
        }


class OutcomeResponse(BaseModel):
    key_id: str
    code: str
    recipient_kind: str
    recipient: str
    status: str
    error_detail: Optional[str] = None

    @classmethod
    def from_domain(cls, outcome: AllocationOutcome) -> "OutcomeResponse":
        return cls(
            key_id=outcome.key.key_id,
            code=outcome.key.code,
            recipient_kind=outcome.recipient.kind.value,
            recipient=outcome.recipient.label,
            status=outcome.status.value,
            error_detail=outcome.error_detail,
        )


class BulkAssignResponse(BaseModel):
    """Aggregate result of a bulk assignment."""
    succeeded_count: int
    failed_count: int
    failed_email_addresses: List[str]
    result: str  # SUCCESS, PARTIAL, FAILURE
    tone: str
    messages: List[str]
    outcomes: List[OutcomeResponse]
    remaining_available: int
    stats: InventoryStatsResponse


class AssignKeyRequest(BaseModel):
    """
    Assign a single key.

    Exactly one of account_id or email is required. Account assignments are
    only executed with confirmed=true; otherwise the pending selection is
    echoed back for confirmation.
    """
    plan_id: str
    account_id: Optional[str] = None
    email: Optional[str] = None
    confirmed: bool = False


class AssignKeyResponse(BaseModel):
    success: bool
    state: str
    key_id: str
    recipient: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# Account and Plan Models
# ============================================================================

class AccountResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    kyc_status: Optional[str] = None


class AccountListResponse(BaseModel):
    items: List[AccountResponse]
    notice: Optional[str] = None


class PlanResponse(BaseModel):
    id: str
    name: str
    amount: Optional[str] = None
    is_active: bool


# ============================================================================
# Error Models
# ============================================================================

class ValidationErrorResponse(BaseModel):
    """Admission guard failure."""
    reason: str
    detail: str

    class Config:
        json_schema_extra = {
            "example": {
                "reason": "CAPACITY_EXCEEDED",
                "detail": "Selected recipients exceed available keys"
            }
        }
