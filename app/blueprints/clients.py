"""
Clients API blueprint: auto-tagging, dashboard suggestions and tag assignment.
"""
from flask import Blueprint, request, jsonify, g, current_app
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict

from app.blueprints.metrics import record_auto_tag, record_suggestions
from app.database import get_session
from app.exceptions import SaasError, ValidationError
from app.middleware import require_login, require_tenant
from app.repositories.sqlalchemy_store import get_store
from app.services import tag_service
from app.services.auto_tag_service import AutoTagContext, auto_tag_client
from app.services.client_suggestion_service import get_client_suggestions

clients_bp = Blueprint('clients', __name__, url_prefix='/api/clients')


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return {}
    return body


def _parse_id(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field_name} must be an integer')


@clients_bp.route('/auto-tag', methods=['POST'])
@require_login
@require_tenant
def auto_tag():
    """
    Run the auto-tag rules for a client after a sale or a signed waiver.

    Body: {clientId, type: "sale"|"waiver", eventId?, eventName?}
    """
    body = _json_body()
    client_id = body.get('clientId')
    context_type = body.get('type')
    if not client_id or not context_type:
        raise ValidationError('clientId and type required')

    client_id = _parse_id(client_id, 'clientId')
    context = AutoTagContext(context_type, event_id=body.get('eventId'), event_name=body.get('eventName'))

    session = get_session()
    store = get_store(session)

    try:
        result = auto_tag_client(store, g.tenant_id, client_id, context)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        record_auto_tag(context.type, failed=True)
        current_app.logger.error(f"[AUTO-TAG] Error for client {client_id}: {e}")
        raise SaasError('Auto-tag failed', 500)

    record_auto_tag(context.type, result)
    return jsonify({'ok': True, 'result': result.to_dict()})


@clients_bp.route('/suggestions', methods=['GET'])
@require_login
@require_tenant
def suggestions():
    """Ranked "reach out" suggestions for the current tenant."""
    config = current_app.config
    ranked = get_client_suggestions(
        get_store(),
        g.tenant_id,
        birthday_window_days=config['BIRTHDAY_WINDOW_DAYS'],
        lapsed_after_days=config['LAPSED_AFTER_DAYS'],
        new_lead_window_days=config['NEW_LEAD_WINDOW_DAYS'],
        candidate_limit=config['SUGGESTION_CANDIDATE_LIMIT'],
        limit=config['CLIENT_SUGGESTION_LIMIT']
    )
    record_suggestions('tenant', ranked)
    return jsonify([s.to_dict() for s in ranked])


@clients_bp.route('/<int:client_id>/tags', methods=['GET'])
@require_login
@require_tenant
def client_tags(client_id):
    return jsonify(tag_service.list_client_tags(get_store(), g.tenant_id, client_id))


@clients_bp.route('/<int:client_id>/tags', methods=['POST'])
@require_login
@require_tenant
def add_client_tag(client_id):
    tag_id = _json_body().get('tag_id')
    if not tag_id:
        raise ValidationError('tag_id required')

    session = get_session()
    tag = tag_service.assign_tag(get_store(session), g.tenant_id, client_id, _parse_id(tag_id, 'tag_id'))
    session.commit()
    return jsonify({'client_id': client_id, 'tag': tag.to_dict()}), 201


@clients_bp.route('/<int:client_id>/tags', methods=['DELETE'])
@require_login
@require_tenant
def remove_client_tag(client_id):
    tag_id = _json_body().get('tag_id')
    if not tag_id:
        raise ValidationError('tag_id required')

    session = get_session()
    removed = tag_service.unassign_tag(get_store(session), g.tenant_id, client_id, _parse_id(tag_id, 'tag_id'))
    session.commit()
    return jsonify({'success': True, 'removed': removed})
