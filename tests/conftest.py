import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self.rows = []
        self.closed = False

    def execute(self, sql):
        self.conn.executed.append(sql)
        result = self.conn.results.get(sql, ("count", -1))
        if isinstance(result, Exception):
            raise result
        if result[0] == "rows":
            _, columns, rows = result
            self.description = [(name, None, None, None, None, None, None) for name in columns]
            self.rows = list(rows)
            self.rowcount = len(rows)
        else:
            self.description = None
            self.rows = []
            self.rowcount = result[1]

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, results=None, commit_error=None, rollback_error=None):
        self.results = results or {}
        self.commit_error = commit_error
        self.rollback_error = rollback_error
        self.executed = []
        self.cursors = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self):
        cur = FakeCursor(self)
        self.cursors.append(cur)
        return cur

    def commit(self):
        if self.commit_error is not None:
            raise self.commit_error
        self.committed = True

    def rollback(self):
        if self.rollback_error is not None:
            raise self.rollback_error
        self.rolled_back = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_connection():
    return FakeConnection
