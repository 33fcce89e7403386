"""
Unit tests for the tag catalog service.
"""

import pytest

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.services import tag_service
from app.utils.tag_colors import is_in_palette


@pytest.fixture
def tenant(memory_store):
    return memory_store.add_tenant()


@pytest.fixture
def walk_in(memory_store, tenant):
    return memory_store.add_client(tenant.id, 'Maya', 'Reyes')


class TestListTags:

    def test_empty_catalog_is_seeded(self, memory_store, tenant):
        tags = tag_service.list_tags(memory_store, tenant.id)

        assert [t['name'] for t in tags] == sorted(d['name'] for d in tag_service.DEFAULT_TAGS)
        assert all(t['usage_count'] == 0 for t in tags)
        auto = {t['name']: t['auto_apply_rule'] for t in tags if t['auto_apply']}
        assert auto == {'New Client': 'new_client', 'Repeat Client': 'repeat_client'}

    def test_colors_are_moved_onto_the_palette(self, memory_store, tenant):
        memory_store.add_tag(tenant.id, 'VIP', color='#C9A96E')

        tags = tag_service.list_tags(memory_store, tenant.id)

        assert tags[0]['color'] == '#EC4899'
        assert is_in_palette(memory_store.find_tag_by_name(tenant.id, 'VIP').color)

    def test_palette_colors_are_left_alone(self, memory_store, tenant):
        memory_store.add_tag(tenant.id, 'VIP', color='#2563EB')

        tag_service.list_tags(memory_store, tenant.id)

        assert 'update_tag' not in memory_store.calls

    def test_usage_counts(self, memory_store, tenant, walk_in):
        vip = memory_store.add_tag(tenant.id, 'VIP', color='#2563EB')
        memory_store.assign_tag_if_absent(walk_in.id, vip.id)

        [tag] = tag_service.list_tags(memory_store, tenant.id)

        assert tag['usage_count'] == 1

    def test_existing_catalog_is_not_reseeded(self, memory_store, tenant):
        memory_store.add_tag(tenant.id, 'VIP', color='#2563EB')

        tags = tag_service.list_tags(memory_store, tenant.id)

        assert [t['name'] for t in tags] == ['VIP']


class TestLegacyCleanup:

    def test_legacy_name_is_renamed(self, memory_store, tenant, walk_in):
        old = memory_store.add_tag(tenant.id, 'First Timer', color='#2563EB')
        memory_store.assign_tag_if_absent(walk_in.id, old.id)

        tag_service.cleanup_legacy_tags(memory_store, tenant.id)

        renamed = memory_store.get_tag(tenant.id, old.id)
        assert renamed.name == 'New Client'
        assert renamed.auto_apply is True
        assert renamed.auto_apply_rule == 'new_client'
        assert memory_store.tag_names_for(walk_in.id) == ['New Client']

    def test_legacy_tag_merges_into_existing_one(self, memory_store, tenant):
        first = memory_store.add_client(tenant.id, 'Ana', 'Silva')
        second = memory_store.add_client(tenant.id, 'Bea', 'Lopez')
        old = memory_store.add_tag(tenant.id, 'Bridal Party')
        current = memory_store.add_tag(tenant.id, 'Girls Night')
        memory_store.assign_tag_if_absent(first.id, old.id)
        memory_store.assign_tag_if_absent(second.id, old.id)
        memory_store.assign_tag_if_absent(second.id, current.id)

        tag_service.cleanup_legacy_tags(memory_store, tenant.id)

        assert memory_store.find_tag_by_name(tenant.id, 'Bridal Party') is None
        assert memory_store.count_tag_assignments(current.id) == 2
        assert memory_store.tag_names_for(first.id) == ['Girls Night']
        assert memory_store.tag_names_for(second.id) == ['Girls Night']

    def test_unused_legacy_tags_are_deleted(self, memory_store, tenant, walk_in):
        memory_store.add_tag(tenant.id, 'Event Lead')
        celebration = memory_store.add_tag(tenant.id, 'Celebration')
        memory_store.assign_tag_if_absent(walk_in.id, celebration.id)

        tag_service.cleanup_legacy_tags(memory_store, tenant.id)

        assert memory_store.find_tag_by_name(tenant.id, 'Event Lead') is None
        assert memory_store.find_tag_by_name(tenant.id, 'Celebration') is not None


class TestCreateTag:

    def test_create(self, memory_store, tenant):
        tag = tag_service.create_tag(memory_store, tenant.id, '  Bridal  ', '#EC4899')

        assert tag.name == 'Bridal'
        assert tag.color == '#EC4899'
        assert tag.auto_apply is False

    def test_default_color(self, memory_store, tenant):
        tag = tag_service.create_tag(memory_store, tenant.id, 'Bridal')

        assert tag.color == tag_service.DEFAULT_TAG_COLOR

    @pytest.mark.parametrize('name', [None, '', '   '])
    def test_name_required(self, memory_store, tenant, name):
        with pytest.raises(ValidationError):
            tag_service.create_tag(memory_store, tenant.id, name)

    @pytest.mark.parametrize('name', [7, ['Bridal'], 'x' * 121])
    def test_bad_name_is_rejected(self, memory_store, tenant, name):
        with pytest.raises(ValidationError):
            tag_service.create_tag(memory_store, tenant.id, name)

        assert memory_store.tenant_tags(tenant.id) == []

    def test_length_is_checked_after_trimming(self, memory_store, tenant):
        tag = tag_service.create_tag(memory_store, tenant.id, ' ' + 'x' * 120 + ' ')

        assert tag.name == 'x' * 120

    def test_duplicate_name_conflicts(self, memory_store, tenant):
        tag_service.create_tag(memory_store, tenant.id, 'Bridal')

        with pytest.raises(ConflictError) as exc_info:
            tag_service.create_tag(memory_store, tenant.id, 'Bridal')
        assert exc_info.value.status_code == 409

    def test_same_name_in_another_tenant(self, memory_store, tenant):
        other = memory_store.add_tenant('Other Studio')
        tag_service.create_tag(memory_store, tenant.id, 'Bridal')

        tag = tag_service.create_tag(memory_store, other.id, 'Bridal')

        assert tag.tenant_id == other.id


class TestClientTags:

    def test_assign_and_list(self, memory_store, tenant, walk_in):
        vip = memory_store.add_tag(tenant.id, 'VIP')

        tag_service.assign_tag(memory_store, tenant.id, walk_in.id, vip.id)
        [entry] = tag_service.list_client_tags(memory_store, tenant.id, walk_in.id)

        assert entry['tag']['name'] == 'VIP'
        assert entry['assigned_at'] is not None

    def test_assign_twice_conflicts(self, memory_store, tenant, walk_in):
        vip = memory_store.add_tag(tenant.id, 'VIP')
        tag_service.assign_tag(memory_store, tenant.id, walk_in.id, vip.id)

        with pytest.raises(ConflictError):
            tag_service.assign_tag(memory_store, tenant.id, walk_in.id, vip.id)

    def test_tag_from_another_tenant_is_not_found(self, memory_store, tenant, walk_in):
        other = memory_store.add_tenant('Other Studio')
        foreign = memory_store.add_tag(other.id, 'VIP')

        with pytest.raises(NotFoundError):
            tag_service.assign_tag(memory_store, tenant.id, walk_in.id, foreign.id)

    def test_client_from_another_tenant_is_not_found(self, memory_store, tenant):
        other = memory_store.add_tenant('Other Studio')
        stranger = memory_store.add_client(other.id)

        with pytest.raises(NotFoundError):
            tag_service.list_client_tags(memory_store, tenant.id, stranger.id)

    def test_unassign(self, memory_store, tenant, walk_in):
        vip = memory_store.add_tag(tenant.id, 'VIP')
        tag_service.assign_tag(memory_store, tenant.id, walk_in.id, vip.id)

        assert tag_service.unassign_tag(memory_store, tenant.id, walk_in.id, vip.id) is True
        assert tag_service.unassign_tag(memory_store, tenant.id, walk_in.id, vip.id) is False
