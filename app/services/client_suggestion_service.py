"""
Client suggestions for the dashboard "reach out" card.

Candidates come from three independent rules (upcoming birthday, lapsed
visit, new lead without a purchase). A client that qualifies for several
rules keeps only its most urgent suggestion.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from app.repositories.base import CrmStore
from app.utils.formatters import as_utc, initials, plural_days, utcnow, whole_days_since

logger = logging.getLogger(__name__)

TYPE_BIRTHDAY = 'birthday'
TYPE_LAPSED = 'lapsed'
TYPE_EVENT_FOLLOW_UP = 'event_follow_up'
TYPE_NEW_LEAD = 'new_lead'

# Lower = more urgent
PRIORITY_ORDER = {
    TYPE_BIRTHDAY: 0,
    TYPE_LAPSED: 1,
    TYPE_EVENT_FOLLOW_UP: 2,
    TYPE_NEW_LEAD: 3,
}

BIRTHDAY_WINDOW_DAYS = 14
LAPSED_AFTER_DAYS = 90
NEW_LEAD_WINDOW_DAYS = 7
CANDIDATE_LIMIT = 10
SUGGESTION_LIMIT = 6


class Suggestion:
    """One actionable notice about a client."""

    def __init__(self, client, suggestion: str, type: str):
        self.client_id = client.id
        self.client_name = client.name
        self.initials = initials(client.first_name, client.last_name)
        self.suggestion = suggestion
        self.type = type

    @property
    def priority(self) -> int:
        return PRIORITY_ORDER[self.type]

    def to_dict(self):
        return {
            'client_id': self.client_id,
            'client_name': self.client_name,
            'initials': self.initials,
            'suggestion': self.suggestion,
            'type': self.type,
        }

    def __repr__(self):
        return f"<Suggestion(client_id={self.client_id}, type='{self.type}')>"


def next_birthday(birthday: date, today: date) -> date:
    """
    Next occurrence of the birthday's month/day on or after today.

    Feb 29 birthdays fall on Mar 1 in non-leap years.
    """
    def occurrence(year):
        try:
            return birthday.replace(year=year)
        except ValueError:
            return date(year, 3, 1)

    upcoming = occurrence(today.year)
    if upcoming < today:
        upcoming = occurrence(today.year + 1)
    return upcoming


def days_until_birthday(birthday: date, today: date) -> int:
    return (next_birthday(birthday, today) - today).days


def birthday_message(days_until: int) -> str:
    if days_until == 0:
        return 'Birthday today!'
    return f"Birthday in {plural_days(days_until)}"


def birthday_suggestions(store: CrmStore, tenant_id, now: datetime,
                         window_days: int = BIRTHDAY_WINDOW_DAYS) -> List[Suggestion]:
    today = now.date()
    suggestions = []
    for client in store.list_clients_with_birthday(tenant_id):
        if not client.birthday:
            continue
        days_until = days_until_birthday(client.birthday, today)
        if days_until <= window_days:
            suggestions.append(Suggestion(client, birthday_message(days_until), TYPE_BIRTHDAY))
    return suggestions


def lapsed_suggestions(store: CrmStore, tenant_id, now: datetime,
                       lapsed_after_days: int = LAPSED_AFTER_DAYS,
                       limit: int = CANDIDATE_LIMIT) -> List[Suggestion]:
    cutoff = now - timedelta(days=lapsed_after_days)
    suggestions = []
    for client in store.list_lapsed_clients(tenant_id, cutoff, limit):
        if not client.last_visit_at:
            continue
        days_since = whole_days_since(client.last_visit_at, now)
        suggestions.append(Suggestion(client, f"Haven't visited in {days_since} days", TYPE_LAPSED))
    return suggestions


def new_lead_suggestions(store: CrmStore, tenant_id, now: datetime,
                         window_days: int = NEW_LEAD_WINDOW_DAYS,
                         limit: int = CANDIDATE_LIMIT) -> List[Suggestion]:
    since = now - timedelta(days=window_days)
    suggestions = []
    for client in store.list_recent_clients(tenant_id, since, limit):
        # One count per candidate; at most `limit` extra reads
        if store.count_completed_sales(client.id) == 0:
            suggestions.append(Suggestion(client, 'New client — no purchase yet', TYPE_NEW_LEAD))
    return suggestions


def rank_suggestions(suggestions: List[Suggestion], limit: int = SUGGESTION_LIMIT) -> List[Suggestion]:
    """
    Stable sort by priority, keep the first suggestion per client, truncate.
    """
    ordered = sorted(suggestions, key=lambda s: s.priority)
    seen = set()
    deduped = []
    for suggestion in ordered:
        if suggestion.client_id in seen:
            continue
        seen.add(suggestion.client_id)
        deduped.append(suggestion)
    return deduped[:limit]


def get_client_suggestions(store: CrmStore, tenant_id, now: Optional[datetime] = None,
                           birthday_window_days: int = BIRTHDAY_WINDOW_DAYS,
                           lapsed_after_days: int = LAPSED_AFTER_DAYS,
                           new_lead_window_days: int = NEW_LEAD_WINDOW_DAYS,
                           candidate_limit: int = CANDIDATE_LIMIT,
                           limit: int = SUGGESTION_LIMIT) -> List[Suggestion]:
    """
    Ranked client suggestions for a tenant.

    Args:
        store: CrmStore implementation
        tenant_id: Tenant whose clients are ranked
        now: Reference time (defaults to current UTC time)

    Returns:
        At most `limit` suggestions, one per client, most urgent first
    """
    now = as_utc(now) if now is not None else utcnow()

    candidates = []
    candidates.extend(birthday_suggestions(store, tenant_id, now, birthday_window_days))
    candidates.extend(lapsed_suggestions(store, tenant_id, now, lapsed_after_days, candidate_limit))
    candidates.extend(new_lead_suggestions(store, tenant_id, now, new_lead_window_days, candidate_limit))

    ranked = rank_suggestions(candidates, limit)
    logger.debug(f"[SUGGESTIONS] tenant={tenant_id} candidates={len(candidates)} returned={len(ranked)}")
    return ranked
