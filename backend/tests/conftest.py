"""Pytest fixtures building an isolated application per test.

Each test gets a fresh application bound to its own in-memory SQLite
database, so services, session stores and the HTTP layer can commit freely
without leaking rows between cases.
"""

from __future__ import annotations

import pytest
from evcharging.core.config import TestingConfig
from evcharging.core.extensions import db as _db  # Flask-SQLAlchemy instance
from evcharging.factory import create_app  # application factory under test


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig` applied, an active app
        context and freshly created tables.
    """
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    """Return the database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """Provide the scoped session and wire Factory Boy to it.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        The application's scoped session.
    """
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(db.session)
    try:
        yield db.session
    finally:
        SQLAlchemySession.set(None)


@pytest.fixture()
def client(app):
    """HTTP client without a cookie jar; tests send ``Cookie`` headers explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def back_office_token(app):
    """Signed access token for a back-office principal."""
    from tests.helpers.auth import issue_token

    return issue_token("back-office-1", role="BackOffice", user_type="BackOffice")
