"""
Admin "Needs Attention" suggestions across all tenants.

Priority: past_due > trial_expiring > inactive > new_signup.
A tenant may appear several times (one entry per rule that fires).
"""

import logging
import math
from datetime import datetime
from typing import Iterable, List, Optional

from app.models import SubscriptionStatus, SubscriptionTier
from app.repositories.base import CrmStore
from app.utils.formatters import (
    as_utc, days_until_ceil, plural_days, utcnow, whole_days_since
)

logger = logging.getLogger(__name__)

TRIAL_WARNING_DAYS = 7
INACTIVE_AFTER_DAYS = 14
NEW_SIGNUP_HOURS = 7 * 24
SUGGESTION_LIMIT = 8

PAID_TIERS = (SubscriptionTier.PRO.value, SubscriptionTier.BUSINESS.value)

URGENCY_PAST_DUE = 1
URGENCY_TRIAL_EXPIRING = 2
URGENCY_INACTIVE = 3
URGENCY_NEW_SIGNUP = 4


class AdminSuggestion:
    """One notice about a tenant for the platform admin dashboard."""

    def __init__(self, type: str, tenant, message: str, urgency: int):
        self.type = type
        self.tenant_id = tenant.id
        self.tenant_name = tenant.name
        self.message = message
        self.urgency = urgency

    def to_dict(self):
        return {
            'type': self.type,
            'tenantId': self.tenant_id,
            'tenantName': self.tenant_name,
            'message': self.message,
            'urgency': self.urgency,
        }

    def __repr__(self):
        return f"<AdminSuggestion(type='{self.type}', tenant_id={self.tenant_id}, urgency={self.urgency})>"


def _signup_label(days_ago: int) -> str:
    if days_ago == 0:
        return 'signed up today'
    if days_ago == 1:
        return 'signed up yesterday'
    return f'signed up {days_ago} days ago'


def evaluate_tenant(tenant, now: datetime) -> List[AdminSuggestion]:
    """Every rule that fires for one tenant, in rule order."""
    suggestions = []
    status = tenant.subscription_status

    if status == SubscriptionStatus.PAST_DUE.value:
        suggestions.append(AdminSuggestion(
            'past_due', tenant, f"{tenant.name} — subscription past due", URGENCY_PAST_DUE
        ))

    if status == SubscriptionStatus.TRIALING.value and tenant.trial_ends_at:
        days_left = days_until_ceil(tenant.trial_ends_at, now)
        if 0 < days_left <= TRIAL_WARNING_DAYS:
            suggestions.append(AdminSuggestion(
                'trial_expiring', tenant,
                f"{tenant.name} — trial expires in {plural_days(days_left)}",
                URGENCY_TRIAL_EXPIRING
            ))

    if (tenant.subscription_tier in PAID_TIERS
            and status == SubscriptionStatus.ACTIVE.value
            and tenant.updated_at):
        days_since = whole_days_since(tenant.updated_at, now)
        if days_since >= INACTIVE_AFTER_DAYS:
            tier_label = tenant.subscription_tier.capitalize()
            suggestions.append(AdminSuggestion(
                'inactive', tenant,
                f"{tenant.name} — no activity in {days_since} days ({tier_label})",
                URGENCY_INACTIVE
            ))

    if tenant.created_at:
        hours_age = (now - as_utc(tenant.created_at)).total_seconds() / 3600
        if hours_age <= NEW_SIGNUP_HOURS:
            days_ago = math.floor(hours_age / 24)
            suggestions.append(AdminSuggestion(
                'new_signup', tenant, f"{tenant.name} — {_signup_label(days_ago)}", URGENCY_NEW_SIGNUP
            ))

    return suggestions


def get_admin_suggestions(tenants: Iterable, now: Optional[datetime] = None,
                          limit: int = SUGGESTION_LIMIT) -> List[AdminSuggestion]:
    """
    Rank tenant notices for the admin dashboard.

    Suspended tenants are skipped. Output is stable-sorted by urgency and
    truncated to `limit`.
    """
    now = as_utc(now) if now is not None else utcnow()

    suggestions = []
    for tenant in tenants:
        if tenant.is_suspended:
            continue
        suggestions.extend(evaluate_tenant(tenant, now))

    suggestions.sort(key=lambda s: s.urgency)
    return suggestions[:limit]


def load_admin_suggestions(store: CrmStore, now: Optional[datetime] = None,
                           limit: int = SUGGESTION_LIMIT) -> List[AdminSuggestion]:
    """Fetch every tenant through the store and rank them."""
    tenants = store.list_tenants()
    suggestions = get_admin_suggestions(tenants, now=now, limit=limit)
    logger.debug(f"[SUGGESTIONS] admin tenants={len(tenants)} returned={len(suggestions)}")
    return suggestions
