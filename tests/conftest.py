"""
Shared fixtures.

FakeSupabase keeps rows in memory and understands the subset of the
supabase-py query builder the services use (select/insert/update/delete,
eq/in_/order/limit, and the two RPCs from the migration). It enforces the
unique constraints and cascades the migration declares.
"""

import copy
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError


UNIQUE_KEYS = {
    "campaigns": [("share_token",)],
    "ad_proofs": [("share_token",)],
    "ad_proof_versions": [("ad_proof_id", "version_number")],
}

TIMESTAMPED = {"clients", "campaigns", "ad_proofs"}

DEFAULTS = {
    "ad_proofs": {"status": "pending", "current_version": 0, "name": None},
    "campaigns": {"platform": None, "share_token": None},
    "clients": {"logo_url": None},
    "comments": {"comment_type": "general", "field_name": None, "commenter_email": None},
    "approvals": {"approver_email": None},
}

CASCADES = {
    "clients": [("campaigns", "client_id")],
    "campaigns": [("ad_proofs", "campaign_id")],
    "ad_proofs": [
        ("ad_proof_versions", "ad_proof_id"),
        ("approvals", "ad_proof_id"),
        ("comments", "ad_proof_id"),
    ],
}


def _duplicate_key(table):
    return APIError({
        "message": f'duplicate key value violates unique constraint "{table}_key"',
        "code": "23505",
    })


class FakeSupabase:
    """In-memory Supabase client."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.rpc_calls = []
        self._failures = defaultdict(int)
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, fn, params):
        self.rpc_calls.append((fn, params))
        return FakeRpc(self, fn, params)

    def fail_next(self, name, times=1):
        """Make the next `times` calls touching table/RPC `name` raise APIError."""
        self._failures[name] += times

    def rows(self, table):
        return copy.deepcopy(self.tables[table])

    def _maybe_fail(self, name):
        if self._failures[name] > 0:
            self._failures[name] -= 1
            raise APIError({"message": f"simulated failure on {name}", "code": "08006"})

    def _now(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _check_unique(self, table, row, ignore=None):
        for columns in UNIQUE_KEYS.get(table, []):
            if any(row.get(c) is None for c in columns):
                continue
            for existing in self.tables[table]:
                if existing is ignore:
                    continue
                if all(existing.get(c) == row.get(c) for c in columns):
                    raise _duplicate_key(table)

    def _insert(self, table, values):
        row = dict(DEFAULTS.get(table, {}))
        row.update(copy.deepcopy(values))
        row.setdefault("id", str(uuid.uuid4()))
        now = self._now()
        row.setdefault("created_at", now)
        if table in TIMESTAMPED:
            row.setdefault("updated_at", now)
        self._check_unique(table, row)
        self.tables[table].append(row)
        return row

    def _delete(self, table, rows):
        for row in rows:
            if row in self.tables[table]:
                self.tables[table].remove(row)
            for child, fk in CASCADES.get(table, []):
                children = [r for r in self.tables[child] if r.get(fk) == row["id"]]
                self._delete(child, children)


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self._limit = None

    def select(self, *columns, **kwargs):
        return self

    def insert(self, values):
        self.op, self.payload = "insert", values
        return self

    def update(self, values):
        self.op, self.payload = "update", values
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def execute(self):
        self.db._maybe_fail(self.table)
        if self.op == "insert":
            values = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db._insert(self.table, v) for v in values]
            return SimpleNamespace(data=copy.deepcopy(inserted))

        matched = [r for r in self.db.tables[self.table] if all(f(r) for f in self.filters)]

        if self.op == "update":
            for row in matched:
                candidate = dict(row, **copy.deepcopy(self.payload))
                self.db._check_unique(self.table, candidate, ignore=row)
                row.update(copy.deepcopy(self.payload))
                if self.table in TIMESTAMPED:
                    row["updated_at"] = self.db._now()
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.op == "delete":
            self.db._delete(self.table, matched)
            return SimpleNamespace(data=copy.deepcopy(matched))

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r: r.get(column), reverse=desc)
        if self._limit is not None:
            matched = matched[:self._limit]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeRpc:
    def __init__(self, db, fn, params):
        self.db = db
        self.fn = fn
        self.params = params

    def execute(self):
        self.db._maybe_fail(self.fn)
        handler = getattr(self, f"_{self.fn}", None)
        if handler is None:
            raise APIError({"message": f"function {self.fn} does not exist", "code": "42883"})
        return SimpleNamespace(data=handler(**self.params))

    def _append_ad_proof_version(self, p_ad_proof_id, p_ad_data):
        proofs = [p for p in self.db.tables["ad_proofs"] if p["id"] == p_ad_proof_id]
        if not proofs:
            raise APIError({"message": f"ad proof {p_ad_proof_id} not found", "code": "P0002"})
        proof = proofs[0]
        next_version = proof["current_version"] + 1
        row = self.db._insert("ad_proof_versions", {
            "ad_proof_id": p_ad_proof_id,
            "version_number": next_version,
            "ad_data": p_ad_data,
        })
        proof["current_version"] = next_version
        proof["updated_at"] = self.db._now()
        return copy.deepcopy(row)

    def _get_approvals_by_share_token(self, p_share_token):
        proof_ids = {
            p["id"] for p in self.db.tables["ad_proofs"] if p["share_token"] == p_share_token
        }
        rows = [a for a in self.db.tables["approvals"] if a["ad_proof_id"] in proof_ids]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return copy.deepcopy(rows)


@pytest.fixture
def db():
    """Empty in-memory database."""
    return FakeSupabase()


@pytest.fixture
def client_row(db):
    return db._insert("clients", {"name": "Acme Inc", "logo_url": "https://logo.clearbit.com/acme.com"})


@pytest.fixture
def campaign_row(db, client_row):
    return db._insert("campaigns", {"client_id": client_row["id"], "name": "Spring Launch"})


@pytest.fixture
def single_image_content():
    return {"headline": "H", "primaryText": "P"}
