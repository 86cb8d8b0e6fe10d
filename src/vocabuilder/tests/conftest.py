"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATA_DIR", os.path.join(tempfile.gettempdir(), "vocabuilder-test-data"))
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.gettempdir(), 'vocabuilder-test.db')}",
)

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from vocabuilder.config import ensure_directories
from vocabuilder.models.base import Base
from vocabuilder.models.models import StoreItem  # noqa: F401


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db(tmp_path: Path) -> Generator[Session, None, None]:
    """Create a database session on a fresh SQLite file for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
