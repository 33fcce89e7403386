import pytest
import uuid
from datetime import datetime, timezone

from app import create_app
from app.database import create_all, drop_all, get_session
from app.models import Tenant, AppUser, UserTenant, AdminUser, Client
from app.repositories.sqlalchemy_store import SqlAlchemyCrmStore
from fakes import InMemoryCrmStore

# Fixed reference time for rule tests
NOW = datetime(2026, 10, 18, 15, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    return create_app('config.TestConfig')


@pytest.fixture(scope='function')
def session(app):
    """Fresh schema per test on the shared in-memory SQLite connection."""
    with app.app_context():
        create_all()
        session = get_session()
        yield session
        session.rollback()
        session.remove()
        drop_all()


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def memory_store():
    """In-memory CrmStore seeded with nothing."""
    return InMemoryCrmStore(now=NOW)


@pytest.fixture
def store(session):
    return SqlAlchemyCrmStore(session)


@pytest.fixture(scope='function')
def tenant1(session):
    """Create first test tenant."""
    suffix = str(uuid.uuid4())[:8]
    tenant = Tenant(
        slug=f'test-tenant-1-{suffix}',
        name=f'Test Tenant 1 {suffix}',
        subscription_tier='pro',
        subscription_status='active'
    )
    session.add(tenant)
    session.commit()
    return tenant


@pytest.fixture(scope='function')
def tenant2(session):
    """Create second test tenant for isolation tests."""
    suffix = str(uuid.uuid4())[:8]
    tenant = Tenant(
        slug=f'test-tenant-2-{suffix}',
        name=f'Test Tenant 2 {suffix}',
        subscription_status='active'
    )
    session.add(tenant)
    session.commit()
    return tenant


def _make_member(session, tenant, role='OWNER'):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(email=f'user-{suffix}@test.com', full_name='Test Artist', active=True)
    user.set_password('password123')
    session.add(user)
    session.flush()
    session.add(UserTenant(user_id=user.id, tenant_id=tenant.id, role=role, active=True))
    session.commit()
    return user


@pytest.fixture(scope='function')
def user1(session, tenant1):
    """Owner of tenant1."""
    return _make_member(session, tenant1)


@pytest.fixture(scope='function')
def client_tenant1(session, tenant1):
    c = Client(tenant_id=tenant1.id, first_name='Maya', last_name='Reyes', email='maya@example.com')
    session.add(c)
    session.commit()
    return c


@pytest.fixture(scope='function')
def client_tenant2(session, tenant2):
    c = Client(tenant_id=tenant2.id, first_name='Noor', last_name='Haddad')
    session.add(c)
    session.commit()
    return c


@pytest.fixture(scope='function')
def authenticated_client(client, user1, tenant1):
    """Create authenticated client for tenant1."""
    with client.session_transaction() as sess:
        sess['user_id'] = user1.id
        sess['tenant_id'] = tenant1.id
    return client


@pytest.fixture(scope='function')
def admin_user(session):
    admin = AdminUser(email='ops@sunstone.test')
    admin.set_password('correct-horse')
    session.add(admin)
    session.commit()
    return admin


@pytest.fixture(scope='function')
def admin_client(client, admin_user):
    with client.session_transaction() as sess:
        sess['admin_user_id'] = admin_user.id
    return client
