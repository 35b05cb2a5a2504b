import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("ARTICLE_VALIDATION_ENABLED", "false")

import pytest

from app.main import app
from app.db.base import Base
from app.db.session import get_db, get_session_factory
from app.core.cart_validation import CartValidator, get_cart_validator
from app.core.notifications import ArticleValidationNotifier, get_article_validation_notifier
from app.core.security import get_current_user
from tests.helpers import FakeCatalog, TestingSessionLocal, engine, make_user


@pytest.fixture()
def db_session():
    """
    Fresh schema per test. Application code commits freely; the tables are
    dropped afterwards.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def catalog():
    return FakeCatalog()


@pytest.fixture()
def current_user():
    return make_user()


@pytest.fixture()
def notifier(catalog):
    # Disabled unless a test turns it on
    return ArticleValidationNotifier(CartValidator(catalog), TestingSessionLocal, enabled=False)


@pytest.fixture(autouse=True)
def override_dependencies(db_session, catalog, current_user, notifier):
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_cart_validator] = lambda: CartValidator(catalog)
    app.dependency_overrides[get_article_validation_notifier] = lambda: notifier
    yield
    app.dependency_overrides.clear()
