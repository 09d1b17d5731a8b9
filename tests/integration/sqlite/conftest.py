"""
Fixtures for SQLite-specific integration tests.
"""
import dbrows
import pytest

CREATE_GAUGES = """
CREATE TABLE gauges (
    id INTEGER NOT NULL,
    label TEXT,
    reading REAL
)
"""


@pytest.fixture
def sqlite_file_profile(tmp_path):
    """File-based SQLite profile for checking data across connections."""
    path = tmp_path / 'sim.db'
    profile = dbrows.ConnectionProfile(f'Data Source={path};Version=3', 'SQLite Data Provider')
    with dbrows.connect(profile) as cn:
        dbrows.execute(cn, CREATE_GAUGES)
    return profile


@pytest.fixture
def sqlite_file_conn(sqlite_file_profile):
    """Open connection to the file-based database with an empty gauges table."""
    cn = dbrows.connect(sqlite_file_profile)
    yield cn
    cn.close()
