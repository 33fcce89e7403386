"""
Admin security decorators.
Provides authentication and authorization for platform admin routes.
"""

from functools import wraps
from flask import session, g
from app.exceptions import AuthenticationRequired, UnauthorizedError


def admin_required(f):
    """
    Decorator: Require a platform admin session.

    IMPORTANT: This checks session['admin_user_id'], NOT g.user or g.tenant_id.
    Admin authentication is completely separate from tenant user authentication.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        admin_user_id = session.get('admin_user_id')
        if not admin_user_id:
            raise AuthenticationRequired()

        from app.database import db_session
        from app.models import AdminUser

        admin_user = db_session.query(AdminUser).filter_by(id=admin_user_id).first()
        if not admin_user:
            # Admin user no longer exists in database
            session.pop('admin_user_id', None)
            raise UnauthorizedError('Invalid admin session')

        g.admin_user = admin_user
        return f(*args, **kwargs)

    return decorated_function
