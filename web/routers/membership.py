"""Membership read endpoint backed by the Supabase memberships table."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from schemas.api.membership import ErrorResponse, MembershipResponse
from services.membership_store import MembershipStoreError, SupabaseMembershipStore
from web.deps import error_response, get_optional_membership_store

router = APIRouter(prefix="/membership", tags=["Membership"])

logger = logging.getLogger(__name__)


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@router.get(
    "/{user_id}",
    response_model=MembershipResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
    summary="Read a user's membership status.",
)
async def read_membership(
    user_id: str,
    store: Optional[SupabaseMembershipStore] = Depends(get_optional_membership_store),
):
    if store is None:
        return error_response(500, "membership_store_unconfigured")
    try:
        row = await store.get_membership(user_id)
    except MembershipStoreError as exc:
        return error_response(500, str(exc) or "server_error")

    if row is None:
        return MembershipResponse(status="none")
    return MembershipResponse(
        status=_optional_str(row.get("status")) or "none",
        plan=_optional_str(row.get("plan")),
        current_period_end=_optional_str(row.get("current_period_end")),
        stripe_customer_id=_optional_str(row.get("stripe_customer_id")),
    )
