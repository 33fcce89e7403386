"""
Auto-tag service: attach and detach rule-driven tags after a sale or a waiver.

Rules:
- "new_client" tags clients with at most one completed sale
- "repeat_client" tags clients with two or more; it also removes "new_client"
- an event name attaches a tag named exactly like the event

Event tag names are matched verbatim. "Spring Fair" and "spring fair" are
two different tags.
"""

import logging
from datetime import datetime
from typing import List, Optional

from app.exceptions import NotFoundError, ValidationError
from app.models import AutoApplyRule, TAG_NAME_MAX_LENGTH
from app.repositories.base import CrmStore, ClientUpdate
from app.utils.formatters import utcnow

logger = logging.getLogger(__name__)

CONTEXT_SALE = 'sale'
CONTEXT_WAIVER = 'waiver'
CONTEXT_TYPES = (CONTEXT_SALE, CONTEXT_WAIVER)

EVENT_TAG_COLOR = '#7C3AED'

# Seeded the first time a tenant has no auto-apply tags
DEFAULT_AUTO_TAGS = [
    {'name': 'New Client', 'color': '#6366F1', 'auto_apply_rule': AutoApplyRule.NEW_CLIENT.value},
    {'name': 'Repeat Client', 'color': '#059669', 'auto_apply_rule': AutoApplyRule.REPEAT_CLIENT.value},
]


class AutoTagContext:
    """What triggered the evaluation: a completed sale or a signed waiver."""

    def __init__(self, type: str, event_id: Optional[str] = None, event_name: Optional[str] = None):
        if type not in CONTEXT_TYPES:
            raise ValidationError(f"Unknown auto-tag context type: {type!r}")
        if event_name is not None:
            if not isinstance(event_name, str):
                raise ValidationError('eventName must be a string')
            if len(event_name) > TAG_NAME_MAX_LENGTH:
                raise ValidationError(f'eventName must be at most {TAG_NAME_MAX_LENGTH} characters')
        self.type = type
        self.event_id = event_id
        self.event_name = event_name

    def __repr__(self):
        return f"<AutoTagContext(type='{self.type}', event_name={self.event_name!r})>"


class AutoTagResult:
    """Mutations performed by one evaluation."""

    def __init__(self, client_id, sales_count: int):
        self.client_id = client_id
        self.sales_count = sales_count
        self.applied_tag_ids: List[int] = []
        self.already_assigned_tag_ids: List[int] = []
        self.removed_tag_ids: List[int] = []
        self.event_tag_id: Optional[int] = None
        self.event_tag_created = False
        self.visit_recorded_at: Optional[datetime] = None

    def to_dict(self):
        return {
            'client_id': self.client_id,
            'sales_count': self.sales_count,
            'applied_tag_ids': list(self.applied_tag_ids),
            'already_assigned_tag_ids': list(self.already_assigned_tag_ids),
            'removed_tag_ids': list(self.removed_tag_ids),
            'event_tag_id': self.event_tag_id,
            'event_tag_created': self.event_tag_created,
            'visit_recorded_at': self.visit_recorded_at.isoformat() if self.visit_recorded_at else None,
        }


def rule_matches(rule: Optional[str], sales_count: int) -> bool:
    """Whether an auto-apply rule fires for a client with sales_count completed sales."""
    if rule == AutoApplyRule.NEW_CLIENT.value:
        return sales_count <= 1
    if rule == AutoApplyRule.REPEAT_CLIENT.value:
        return sales_count >= 2
    return False


def ensure_auto_tags(store: CrmStore, tenant_id):
    """Auto-apply tags of the tenant, seeding the defaults when there are none."""
    auto_tags = store.list_auto_apply_tags(tenant_id)
    if auto_tags:
        return auto_tags

    logger.info(f"[AUTO-TAG] Seeding default auto-tags for tenant {tenant_id}")
    for default in DEFAULT_AUTO_TAGS:
        store.insert_tag_if_absent(
            tenant_id,
            default['name'],
            default['color'],
            auto_apply=True,
            auto_apply_rule=default['auto_apply_rule']
        )
    return store.list_auto_apply_tags(tenant_id)


def auto_tag_client(store: CrmStore, tenant_id, client_id, context: AutoTagContext,
                    now: Optional[datetime] = None) -> AutoTagResult:
    """
    Evaluate the auto-tag rules for one client.

    The triggering sale must already be written: it counts toward the
    completed-sales total. Store errors propagate; writes done before the
    failure stay in the caller's transaction. Running twice with the same
    context leaves the same assignments as running once.

    Args:
        store: CrmStore implementation
        tenant_id: Tenant owning the client
        client_id: Client to evaluate
        context: AutoTagContext (sale or waiver, optional event name)
        now: Reference time for the visit stamp (defaults to current UTC time)

    Returns:
        AutoTagResult describing applied/removed tags
    """
    if now is None:
        now = utcnow()

    if store.get_client(tenant_id, client_id) is None:
        raise NotFoundError('Client not found')

    auto_tags = ensure_auto_tags(store, tenant_id)
    sales_count = store.count_completed_sales(client_id)
    result = AutoTagResult(client_id, sales_count)

    tags_to_apply = [tag.id for tag in auto_tags if rule_matches(tag.auto_apply_rule, sales_count)]

    if context.event_name:
        event_tag, created = store.insert_tag_if_absent(
            tenant_id,
            context.event_name,
            EVENT_TAG_COLOR,
            auto_apply=False
        )
        result.event_tag_id = event_tag.id
        result.event_tag_created = created
        tags_to_apply.append(event_tag.id)

    for tag_id in tags_to_apply:
        if store.assign_tag_if_absent(client_id, tag_id):
            result.applied_tag_ids.append(tag_id)
        else:
            result.already_assigned_tag_ids.append(tag_id)

    if rule_matches(AutoApplyRule.REPEAT_CLIENT.value, sales_count):
        new_client_tag = next(
            (tag for tag in auto_tags if tag.auto_apply_rule == AutoApplyRule.NEW_CLIENT.value),
            None
        )
        if new_client_tag and store.remove_tag_assignment(client_id, new_client_tag.id):
            result.removed_tag_ids.append(new_client_tag.id)

    if context.type == CONTEXT_SALE:
        store.update_client(client_id, ClientUpdate(last_visit_at=now))
        result.visit_recorded_at = now

    logger.info(
        f"[AUTO-TAG] tenant={tenant_id} client={client_id} type={context.type} "
        f"sales={sales_count} applied={result.applied_tag_ids} removed={result.removed_tag_ids}"
    )
    return result
