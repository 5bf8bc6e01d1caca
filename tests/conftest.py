"""
Shared fixtures: fake database collaborators for SRID lookups.
"""

import pytest


class FakeQueryExecutor:
    """
    Scalar query executor answering from a table of SQL fragments.

    The first fragment contained in the query decides the answer; unknown
    queries return None. Every query is recorded.
    """

    def __init__(self, answers=None, error=None):
        self.answers = dict(answers or {})
        self.error = error
        self.queries = []

    def __call__(self, sql):
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        for fragment, value in self.answers.items():
            if fragment in sql:
                return value
        return None


class FakeCursor:
    def __init__(self, row):
        self.row = row
        self.executed = []
        self.closed = False

    def execute(self, sql):
        self.executed.append(sql)

    def fetchone(self):
        return self.row

    def close(self):
        self.closed = True


class FakeConnection:
    """Minimal DB-API connection handing out one cursor."""

    def __init__(self, row):
        self.cursor_obj = FakeCursor(row)

    def cursor(self):
        return self.cursor_obj


@pytest.fixture
def fake_executor():
    """Executor resolving EPSG:4326 -> 8307 (geodetic) and EPSG:25830 -> 25830 (projected)."""
    return FakeQueryExecutor({
        "COORD_REF_SYS_KIND from SDO_COORD_REF_SYSTEM where srid = 8307": "GEOGRAPHIC2D",
        "COORD_REF_SYS_KIND from SDO_COORD_REF_SYSTEM where srid = 25830": "PROJECTED",
        "MAP_EPSG_SRID_TO_ORACLE(4326)": "8307",
        "MAP_EPSG_SRID_TO_ORACLE(25830)": "25830",
    })


@pytest.fixture
def fake_connection():
    return FakeConnection


@pytest.fixture
def make_executor():
    return FakeQueryExecutor
