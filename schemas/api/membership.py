"""Membership, checkout and billing-portal API schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Short machine-readable error or provider message.")


class MembershipResponse(BaseModel):
    status: str = Field(..., description="Billing status (e.g. active, canceled) or 'none' without a membership.")
    plan: Optional[str] = Field(default=None, description="Paid plan ('member' or 'pro').")
    current_period_end: Optional[str] = Field(default=None, description="End of the current billing period.")
    stripe_customer_id: Optional[str] = Field(default=None, description="Stripe customer reference.")


class BillingPortalRequest(BaseModel):
    stripe_customer_id: Optional[str] = Field(default=None, description="Stripe customer to open the portal for.")
    return_url: Optional[str] = Field(default=None, description="Where Stripe sends the user back to.")


class BillingPortalResponse(BaseModel):
    url: str = Field(..., description="Hosted billing portal URL.")


__all__ = [
    "BillingPortalRequest",
    "BillingPortalResponse",
    "ErrorResponse",
    "MembershipResponse",
]
