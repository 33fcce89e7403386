"""
Tag catalog service: default tags, legacy cleanup and manual assignment.
"""

import logging
from typing import Optional

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import AutoApplyRule, TAG_NAME_MAX_LENGTH
from app.repositories.base import CrmStore, TagUpdate
from app.utils.tag_colors import is_in_palette, nearest_palette_color

logger = logging.getLogger(__name__)

DEFAULT_TAG_COLOR = '#7A8B8C'

# Seeded when a tenant opens the tag catalog for the first time
DEFAULT_TAGS = [
    {'name': 'New Client', 'color': '#6B7F99', 'auto_apply': True,
     'auto_apply_rule': AutoApplyRule.NEW_CLIENT.value},
    {'name': 'Repeat Client', 'color': '#9C8B7A', 'auto_apply': True,
     'auto_apply_rule': AutoApplyRule.REPEAT_CLIENT.value},
    {'name': 'VIP', 'color': '#C9A96E', 'auto_apply': False, 'auto_apply_rule': None},
    {'name': 'Girls Night', 'color': '#B76E79', 'auto_apply': False, 'auto_apply_rule': None},
    {'name': 'Private Party', 'color': '#8B6E7F', 'auto_apply': False, 'auto_apply_rule': None},
    {'name': 'Referral Source', 'color': '#7D8E6E', 'auto_apply': False, 'auto_apply_rule': None},
]

# Old tag names -> current names, for tenants created before the rename
RENAME_MAP = {
    'First Timer': TagUpdate(name='New Client', color='#6B7F99', auto_apply=True,
                             auto_apply_rule=AutoApplyRule.NEW_CLIENT.value),
    'Repeat Customer': TagUpdate(name='Repeat Client', color='#9C8B7A', auto_apply=True,
                                 auto_apply_rule=AutoApplyRule.REPEAT_CLIENT.value),
    'Bridal Party': TagUpdate(name='Girls Night', color='#B76E79'),
}

DELETE_IF_UNUSED = ['Event Lead', 'Celebration']


def seed_default_tags(store: CrmStore, tenant_id):
    logger.info(f"Seeding default tag catalog for tenant {tenant_id}")
    for default in DEFAULT_TAGS:
        store.insert_tag_if_absent(
            tenant_id,
            default['name'],
            default['color'],
            auto_apply=default['auto_apply'],
            auto_apply_rule=default['auto_apply_rule']
        )


def cleanup_legacy_tags(store: CrmStore, tenant_id):
    """
    Rename legacy tags and drop unused ones.

    When the new name already exists, assignments of the old tag move to it
    and the old tag is deleted.
    """
    for old_name, update in RENAME_MAP.items():
        old_tag = store.find_tag_by_name(tenant_id, old_name)
        if old_tag is None:
            continue

        new_tag = store.find_tag_by_name(tenant_id, update.name)
        if new_tag is not None:
            moved = store.move_tag_assignments(old_tag.id, new_tag.id)
            store.delete_tag(old_tag.id)
            logger.info(f"Merged tag '{old_name}' into '{update.name}' ({moved} assignments) for tenant {tenant_id}")
        else:
            store.update_tag(old_tag.id, update)
            logger.info(f"Renamed tag '{old_name}' to '{update.name}' for tenant {tenant_id}")

    for tag_name in DELETE_IF_UNUSED:
        tag = store.find_tag_by_name(tenant_id, tag_name)
        if tag is not None and store.count_tag_assignments(tag.id) == 0:
            store.delete_tag(tag.id)
            logger.info(f"Deleted unused tag '{tag_name}' for tenant {tenant_id}")


def list_tags(store: CrmStore, tenant_id):
    """
    Tag catalog of a tenant with usage counts, ordered by name.

    Seeds the defaults for a tenant without tags, otherwise runs the legacy
    cleanup. Colors outside the palette are migrated to the nearest one.
    """
    existing = store.list_tags(tenant_id)
    if not existing:
        seed_default_tags(store, tenant_id)
    else:
        cleanup_legacy_tags(store, tenant_id)

    result = []
    for tag, usage_count in store.list_tags(tenant_id):
        if tag.color and not is_in_palette(tag.color):
            new_color = nearest_palette_color(tag.color)
            store.update_tag(tag.id, TagUpdate(color=new_color))
        result.append(tag.to_dict(usage_count=usage_count))
    return result


def create_tag(store: CrmStore, tenant_id, name: Optional[str], color: Optional[str] = None):
    """Create a manual tag. The name is trimmed and must be unique in the tenant."""
    if name is not None and not isinstance(name, str):
        raise ValidationError('name must be a string')
    name = (name or '').strip()
    if not name:
        raise ValidationError('name required')
    if len(name) > TAG_NAME_MAX_LENGTH:
        raise ValidationError(f'name must be at most {TAG_NAME_MAX_LENGTH} characters')

    tag, created = store.insert_tag_if_absent(tenant_id, name, color or DEFAULT_TAG_COLOR)
    if not created:
        raise ConflictError('A tag with that name already exists')
    return tag


def _require_client(store: CrmStore, tenant_id, client_id):
    client = store.get_client(tenant_id, client_id)
    if client is None:
        raise NotFoundError('Client not found')
    return client


def _require_tag(store: CrmStore, tenant_id, tag_id):
    tag = store.get_tag(tenant_id, tag_id)
    if tag is None:
        raise NotFoundError('Tag not found')
    return tag


def list_client_tags(store: CrmStore, tenant_id, client_id):
    _require_client(store, tenant_id, client_id)
    return [
        {
            'id': assignment.id,
            'assigned_at': assignment.assigned_at.isoformat() if assignment.assigned_at else None,
            'tag': assignment.tag.to_dict(),
        }
        for assignment in store.list_client_assignments(client_id)
    ]


def assign_tag(store: CrmStore, tenant_id, client_id, tag_id):
    """Attach a tag of the same tenant to a client."""
    _require_client(store, tenant_id, client_id)
    tag = _require_tag(store, tenant_id, tag_id)
    if not store.assign_tag_if_absent(client_id, tag.id):
        raise ConflictError('Tag already assigned')
    return tag


def unassign_tag(store: CrmStore, tenant_id, client_id, tag_id):
    _require_client(store, tenant_id, client_id)
    return store.remove_tag_assignment(client_id, tag_id)
