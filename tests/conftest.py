"""
Pytest configuration and fixtures for roster service tests.
"""
import os
import sys
from datetime import datetime

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['ENV'] = 'testing'
os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'

from sportmanager.app import create_app
from sportmanager.models import db
from sportmanager.memory_store import InMemoryStore
from sportmanager.player_directory import PlayerDirectory
from sportmanager.match_catalog import MatchCatalog
from sportmanager.match_roster import MatchRoster


MATCH_DATE = datetime(2026, 11, 1, 10, 0)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create database session for testing."""
    with app.app_context():
        # Clear all tables before each test
        db.session.remove()

        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


# ==================== In-memory core ====================

@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def directory(store):
    return PlayerDirectory(store)


@pytest.fixture
def catalog(store):
    return MatchCatalog(store)


@pytest.fixture
def roster(store, directory):
    return MatchRoster(store, directory)


@pytest.fixture
def small_match(catalog):
    """A match with room for two players."""
    return catalog.create_match(date=MATCH_DATE, location="Field A", max_players=2)


@pytest.fixture
def full_match(roster, small_match):
    """small_match with Alice and Bob already on the roster."""
    roster.join(small_match.id, "Alice")
    roster.join(small_match.id, "Bob")
    return small_match
