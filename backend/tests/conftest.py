import os, sys, pytest
# Ensure the backend directory is on path so 'fieldjobs' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from fieldjobs import create_app, get_db, get_broadcaster
from fieldjobs.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import fieldjobs.models.job  # noqa: F401
import fieldjobs.models.job_status_history  # noqa: F401

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-secret',
        'BROADCAST_BACKEND': 'memory',
        'STATUS_HISTORY_LIMIT': 10,
    })
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()

@pytest.fixture()
def broadcaster(app_instance):
    """The app's in-memory broadcaster, emptied before each test that asks for it."""
    with app_instance.app_context():
        b = get_broadcaster()
    b.clear()
    return b
