"""Middleware for authentication and tenant context."""
from functools import wraps
from flask import session, g, current_app
from app.database import db_session
from app.exceptions import AuthenticationRequired, UnauthorizedError
from app.models import AppUser, Tenant, UserTenant


def load_user_and_tenant():
    """
    Load current user and tenant into g (Flask's per-request global).

    Called before each request to establish user and tenant context.
    Sets g.user, g.tenant_id and g.user_role if authenticated and the user
    holds an active membership in a non-suspended tenant.
    """
    g.user = None
    g.tenant_id = None
    g.user_role = None

    user_id = session.get('user_id')
    if not user_id:
        return

    user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
    if not user:
        return
    g.user = user

    tenant_id = session.get('tenant_id')
    if not tenant_id:
        return

    membership = db_session.query(UserTenant).filter_by(
        user_id=user.id,
        tenant_id=tenant_id,
        active=True
    ).first()
    if not membership:
        # User doesn't have access to this tenant, clear it
        session.pop('tenant_id', None)
        return

    tenant = db_session.query(Tenant).filter_by(id=tenant_id).first()
    if tenant is None or tenant.is_suspended:
        current_app.logger.warning(f"Blocked access to suspended tenant {tenant_id} by user {user.id}")
        session.pop('tenant_id', None)
        return

    g.tenant_id = tenant.id
    g.user_role = membership.role


def require_login(f):
    """Decorator: Require a logged-in user (401 otherwise)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise AuthenticationRequired()
        return f(*args, **kwargs)
    return decorated_function


def require_tenant(f):
    """
    Decorator: Require an active tenant membership (403 otherwise).

    Must be used AFTER require_login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('tenant_id') is None:
            raise UnauthorizedError('No active business selected')
        return f(*args, **kwargs)
    return decorated_function
