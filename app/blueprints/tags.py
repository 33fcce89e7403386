"""
Tags API blueprint: tenant tag catalog.
"""
from flask import Blueprint, request, jsonify, g

from app.database import get_session
from app.middleware import require_login, require_tenant
from app.repositories.sqlalchemy_store import get_store
from app.services import tag_service

tags_bp = Blueprint('tags', __name__, url_prefix='/api/tags')


@tags_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_tags():
    """Tag catalog with usage counts. Seeds defaults on first access."""
    session = get_session()
    tags = tag_service.list_tags(get_store(session), g.tenant_id)
    # Seeding, cleanup and color migration are written on read
    session.commit()
    return jsonify(tags)


@tags_bp.route('', methods=['POST'])
@require_login
@require_tenant
def create_tag():
    body = request.get_json(silent=True) or {}
    session = get_session()
    tag = tag_service.create_tag(get_store(session), g.tenant_id, body.get('name'), body.get('color'))
    session.commit()
    return jsonify(tag.to_dict()), 201
