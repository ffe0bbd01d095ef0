import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'tunebox' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def extractor():
    """Stub extractor returning no tags; tests customise ``metadata``/``error``."""
    return test_stubs.StubMetadataExtractor()


@pytest.fixture
def make_app(tmp_path, upload_dir, extractor):
    """Build an app on a per-test SQLite file; keyword overrides land in app.config."""
    import app as app_module

    def _make(**overrides):
        db_path = tmp_path / "test.sqlite"
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path.as_posix()}",
            "UPLOAD_DIR": str(upload_dir),
            "REQUIRE_EXISTING_PLAYLIST": True,
            "ALLOW_CLEAR_ALL": True,
        }
        config.update(overrides)
        application = app_module.create_app(config)
        application.extensions["library_service"].extractor = extractor
        return application

    return _make


@pytest.fixture
def app(make_app):
    yield make_app()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from tunebox.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def service(app_context, db_session):
    return app_context.extensions["library_service"]


@pytest.fixture
def blob_store(service):
    return service.blob_store


@pytest.fixture
def client(app):
    return app.test_client()
