"""
Pytest configuration for TransTrack tests
This file configures paths and fixtures for all tests
"""
import sys
import os
from pathlib import Path

import pytest
import pytest_asyncio

# Get the project root directory
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src"

# Add project directories to Python path
sys.path.insert(0, str(SRC_DIR))
sys.path.insert(0, str(PROJECT_ROOT / "tests"))

# Set environment variables for testing
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

from transtrack.core.authorization import AuthorizationBoundary, Principal  # noqa: E402
from transtrack.db import close_db, init_db, make_engine, make_session_maker  # noqa: E402
from transtrack.models import UserRole  # noqa: E402
from transtrack.services.lifecycle import JobDetails  # noqa: E402

from helpers import FakeClock  # noqa: E402

# Configure pytest
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")

# Shared fixtures
@pytest.fixture(scope="session")
def project_root():
    """Return project root directory"""
    return PROJECT_ROOT

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def alice():
    return Principal(id="u-alice", username="alice", role=UserRole.USER)

@pytest.fixture
def bob():
    return Principal(id="u-bob", username="bob", role=UserRole.USER)

@pytest.fixture
def admin():
    return Principal(id="u-admin", username="admin", role=UserRole.ADMIN)

@pytest.fixture
def as_alice(alice):
    return AuthorizationBoundary.for_principal(alice)

@pytest.fixture
def as_bob(bob):
    return AuthorizationBoundary.for_principal(bob)

@pytest.fixture
def as_admin(admin):
    return AuthorizationBoundary.for_principal(admin)

@pytest.fixture
def anonymous():
    return AuthorizationBoundary.for_principal(None)

@pytest.fixture
def sample_details():
    """A valid single-document submission"""
    return JobDetails(
        file_name="report.pdf",
        file_size=2048,
        source_language="English",
        target_language="French",
    )

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """File-backed SQLite database, so concurrent sessions see each other's writes"""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'transtrack.db'}", echo=False)
    await init_db(engine)
    yield engine
    await close_db(engine)

@pytest.fixture
def session_maker(db_engine):
    return make_session_maker(db_engine)
