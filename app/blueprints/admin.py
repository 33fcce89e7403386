"""
Admin Blueprint - platform operator API.

Routes:
- /api/admin/login - Admin authentication
- /api/admin/logout - Admin logout
- /api/admin/suggestions - "Needs Attention" card
- /api/admin/tenants/<id>/suspend - Suspend tenant
- /api/admin/tenants/<id>/reactivate - Reactivate tenant
"""

from flask import Blueprint, request, session, jsonify, current_app

from app.blueprints.metrics import record_suggestions
from app.database import get_session
from app.decorators.admin_security import admin_required
from app.exceptions import AuthenticationRequired, NotFoundError, ValidationError
from app.models import AdminUser, Tenant
from app.repositories.sqlalchemy_store import get_store
from app.services.admin_suggestion_service import load_admin_suggestions
from app.utils.formatters import utcnow

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def _get_tenant_or_404(tenant_id: int) -> Tenant:
    """Fetch tenant or raise NotFoundError."""
    tenant = get_session().query(Tenant).filter_by(id=tenant_id).first()
    if not tenant:
        raise NotFoundError('Tenant not found')
    return tenant


@admin_bp.route('/login', methods=['POST'])
def login():
    """Admin login - separate from tenant user login."""
    body = request.get_json(silent=True) or {}
    email = (body.get('email') or '').strip()
    password = body.get('password') or ''
    if not email or not password:
        raise ValidationError('email and password required')

    session_db = get_session()
    admin_user = session_db.query(AdminUser).filter_by(email=email).first()
    if not admin_user or not admin_user.check_password(password):
        current_app.logger.warning(f"Failed admin login attempt for {email}")
        raise AuthenticationRequired('Invalid credentials')

    admin_user.last_login = utcnow()
    session_db.commit()

    session.clear()
    session['admin_user_id'] = admin_user.id
    current_app.logger.info(f"Admin {admin_user.email} logged in")
    return jsonify({'ok': True, 'admin': {'id': admin_user.id, 'email': admin_user.email}})


@admin_bp.route('/logout', methods=['POST'])
def logout():
    session.pop('admin_user_id', None)
    return jsonify({'ok': True})


@admin_bp.route('/suggestions', methods=['GET'])
@admin_required
def suggestions():
    """Tenants needing attention: past due, expiring trials, inactive, new signups."""
    ranked = load_admin_suggestions(get_store(), limit=current_app.config['ADMIN_SUGGESTION_LIMIT'])
    record_suggestions('admin', ranked)
    return jsonify({'suggestions': [s.to_dict() for s in ranked]})


@admin_bp.route('/tenants/<int:tenant_id>/suspend', methods=['POST'])
@admin_required
def suspend_tenant(tenant_id):
    """Suspended tenants lose access and drop out of the suggestions."""
    tenant = _get_tenant_or_404(tenant_id)
    tenant.is_suspended = True
    get_session().commit()
    current_app.logger.info(f"Tenant {tenant.id} suspended")
    return jsonify({'ok': True, 'tenant_id': tenant.id, 'is_suspended': True})


@admin_bp.route('/tenants/<int:tenant_id>/reactivate', methods=['POST'])
@admin_required
def reactivate_tenant(tenant_id):
    tenant = _get_tenant_or_404(tenant_id)
    tenant.is_suspended = False
    get_session().commit()
    current_app.logger.info(f"Tenant {tenant.id} reactivated")
    return jsonify({'ok': True, 'tenant_id': tenant.id, 'is_suspended': False})
