"""
Integration tests for the clients API (auto-tag, suggestions, client tags).
"""

import pytest
from datetime import date, timedelta

from sqlalchemy.exc import OperationalError

from app.models import Client, ClientTag, ClientTagAssignment, Sale
from app.utils.formatters import utcnow


def _complete_sale(session, client):
    session.add(Sale(tenant_id=client.tenant_id, client_id=client.id, total=60))
    session.commit()


def _tag_names(session, client_id):
    rows = session.query(ClientTag.name).join(
        ClientTagAssignment, ClientTagAssignment.tag_id == ClientTag.id
    ).filter(ClientTagAssignment.client_id == client_id).order_by(ClientTag.name).all()
    return [name for (name,) in rows]


class TestAutoTagEndpoint:

    def test_requires_login(self, client, client_tenant1):
        response = client.post('/api/clients/auto-tag', json={'clientId': client_tenant1.id, 'type': 'sale'})

        assert response.status_code == 401

    @pytest.mark.parametrize('body', [
        {},
        {'clientId': 1},
        {'type': 'sale'},
    ])
    def test_missing_fields(self, authenticated_client, body):
        response = authenticated_client.post('/api/clients/auto-tag', json=body)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'clientId and type required'

    def test_unknown_type(self, authenticated_client, client_tenant1):
        response = authenticated_client.post(
            '/api/clients/auto-tag', json={'clientId': client_tenant1.id, 'type': 'refund'}
        )

        assert response.status_code == 400

    @pytest.mark.parametrize('event_name', [42, ['Spring Fair'], {'name': 'Spring Fair'}, 'x' * 121])
    def test_bad_event_name(self, authenticated_client, session, client_tenant1, event_name):
        client_id = client_tenant1.id

        response = authenticated_client.post(
            '/api/clients/auto-tag', json={'clientId': client_id, 'type': 'sale', 'eventName': event_name}
        )

        assert response.status_code == 400
        assert _tag_names(session, client_id) == []

    def test_unknown_client(self, authenticated_client):
        response = authenticated_client.post('/api/clients/auto-tag', json={'clientId': 999999, 'type': 'sale'})

        assert response.status_code == 404

    def test_first_sale(self, authenticated_client, session, client_tenant1):
        client_id = client_tenant1.id
        _complete_sale(session, client_tenant1)

        response = authenticated_client.post('/api/clients/auto-tag', json={'clientId': client_id, 'type': 'sale'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['ok'] is True
        assert data['result']['sales_count'] == 1
        assert data['result']['visit_recorded_at'] is not None
        assert _tag_names(session, client_id) == ['New Client']
        assert session.get(Client, client_id).last_visit_at is not None

    def test_second_sale_with_event(self, authenticated_client, session, client_tenant1):
        client_id = client_tenant1.id
        _complete_sale(session, client_tenant1)
        authenticated_client.post('/api/clients/auto-tag', json={'clientId': client_id, 'type': 'sale'})
        _complete_sale(session, session.get(Client, client_id))

        response = authenticated_client.post('/api/clients/auto-tag', json={
            'clientId': client_id, 'type': 'sale', 'eventId': 'evt-9', 'eventName': 'Spring Fair'
        })

        result = response.get_json()['result']
        assert result['sales_count'] == 2
        assert result['event_tag_created'] is True
        assert len(result['removed_tag_ids']) == 1
        assert _tag_names(session, client_id) == ['Repeat Client', 'Spring Fair']

    def test_repeat_call_is_idempotent(self, authenticated_client, session, client_tenant1):
        client_id = client_tenant1.id
        body = {'clientId': client_id, 'type': 'waiver', 'eventName': 'Spring Fair'}

        authenticated_client.post('/api/clients/auto-tag', json=body)
        response = authenticated_client.post('/api/clients/auto-tag', json=body)

        assert response.get_json()['result']['applied_tag_ids'] == []
        assert _tag_names(session, client_id) == ['New Client', 'Spring Fair']

    def test_store_failure_is_500(self, authenticated_client, client_tenant1, monkeypatch):
        def broken(*args, **kwargs):
            raise OperationalError('SELECT 1', {}, Exception('database is locked'))
        monkeypatch.setattr('app.blueprints.clients.auto_tag_client', broken)

        response = authenticated_client.post(
            '/api/clients/auto-tag', json={'clientId': client_tenant1.id, 'type': 'sale'}
        )

        assert response.status_code == 500
        assert response.get_json()['message'] == 'Auto-tag failed'


class TestSuggestionsEndpoint:

    def test_ranked_suggestions(self, authenticated_client, session, tenant1):
        now = utcnow()
        long_ago = now - timedelta(days=365)
        soon = (now + timedelta(days=3)).date()
        session.add_all([
            Client(tenant_id=tenant1.id, first_name='Amy', last_name='Birch',
                   birthday=date(1992, soon.month, soon.day), created_at=long_ago),
            Client(tenant_id=tenant1.id, first_name='Ben', last_name='Stone',
                   last_visit_at=now - timedelta(days=95), created_at=long_ago),
            Client(tenant_id=tenant1.id, first_name='Cal', last_name='Reed',
                   created_at=now - timedelta(days=2)),
        ])
        session.commit()

        response = authenticated_client.get('/api/clients/suggestions')

        assert response.status_code == 200
        data = response.get_json()
        assert [(s['client_name'], s['type']) for s in data] == [
            ('Amy Birch', 'birthday'),
            ('Ben Stone', 'lapsed'),
            ('Cal Reed', 'new_lead'),
        ]
        assert data[0]['initials'] == 'AB'

    def test_empty_tenant(self, authenticated_client):
        response = authenticated_client.get('/api/clients/suggestions')

        assert response.status_code == 200
        assert response.get_json() == []


class TestClientTagsEndpoint:

    @pytest.fixture
    def vip_tag_id(self, session, tenant1):
        tag = ClientTag(tenant_id=tenant1.id, name='VIP', color='#D97706')
        session.add(tag)
        session.commit()
        return tag.id

    def test_assign_list_remove(self, authenticated_client, client_tenant1, vip_tag_id):
        url = f'/api/clients/{client_tenant1.id}/tags'

        created = authenticated_client.post(url, json={'tag_id': vip_tag_id})
        listed = authenticated_client.get(url)
        removed = authenticated_client.delete(url, json={'tag_id': vip_tag_id})

        assert created.status_code == 201
        assert created.get_json()['tag']['name'] == 'VIP'
        assert [entry['tag']['id'] for entry in listed.get_json()] == [vip_tag_id]
        assert removed.get_json() == {'success': True, 'removed': True}

    def test_assign_twice_conflicts(self, authenticated_client, client_tenant1, vip_tag_id):
        url = f'/api/clients/{client_tenant1.id}/tags'
        authenticated_client.post(url, json={'tag_id': vip_tag_id})

        response = authenticated_client.post(url, json={'tag_id': vip_tag_id})

        assert response.status_code == 409

    def test_tag_id_required(self, authenticated_client, client_tenant1):
        response = authenticated_client.post(f'/api/clients/{client_tenant1.id}/tags', json={})

        assert response.status_code == 400

    def test_unknown_tag(self, authenticated_client, client_tenant1):
        response = authenticated_client.post(f'/api/clients/{client_tenant1.id}/tags', json={'tag_id': 424242})

        assert response.status_code == 404
