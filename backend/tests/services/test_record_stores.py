"""Record store contract — the same outcomes from the SQL and in-memory backends.

Invariants:
    - create() is create-if-absent
    - conditional_update: COMMITTED only when every expected field matches;
      PREDICATE_FAILED and NOT_FOUND write nothing
    - list_documents honours order and direction
    - A RecordStores bundle is healthy only if every checked store is
"""

from datetime import timedelta

import pytest

from app.core.domain_types import UpdateOutcome
from app.core.records import new_project_document
from app.core.repository_protocols import Mutation
from app.infrastructure.clock import utc_now
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.memory_record_store import InMemoryRecordStore
from app.infrastructure.record_stores import memory_stores, sql_stores
from app.infrastructure.sql_record_store import SqlProjectStore, SqlSignupCodeStore
from tests.services.store_doubles import T0, signup_code_doc


async def _backend(kind: str, tmp_path, memory_key: str, sql_store_cls):
    if kind == "memory":
        yield InMemoryRecordStore(key_field=memory_key)
        return
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'contract.db'}")
    await manager.create_schema()
    yield sql_store_cls(manager)
    await manager.dispose()


@pytest.fixture(params=["memory", "sql"])
async def codes(request, tmp_path):
    async for store in _backend(request.param, tmp_path, "code", SqlSignupCodeStore):
        yield store


@pytest.fixture(params=["memory", "sql"])
async def projects(request, tmp_path):
    async for store in _backend(request.param, tmp_path, "id", SqlProjectStore):
        yield store


async def test_get_missing_returns_none(codes):
    assert await codes.get("missing") is None


async def test_create_if_absent(codes):
    assert await codes.create("ABC", signup_code_doc(email="first@example.com")) is True
    assert await codes.create("ABC", signup_code_doc(email="second@example.com")) is False

    doc = await codes.get("ABC")
    assert doc["code"] == "ABC"
    assert doc["email"] == "first@example.com"


async def test_conditional_update_commits_when_predicate_holds(codes):
    await codes.create("ABC", signup_code_doc())

    outcome = await codes.conditional_update(
        "ABC", {"used": False}, Mutation(set_fields={"used": True, "used_at": T0}),
    )

    assert outcome == UpdateOutcome.COMMITTED
    doc = await codes.get("ABC")
    assert doc["used"] is True
    assert doc["used_at"] is not None


async def test_conditional_update_predicate_failure_writes_nothing(codes):
    await codes.create("ABC", signup_code_doc(used=True, payment_id="pi_1"))

    outcome = await codes.conditional_update(
        "ABC", {"used": False}, Mutation(set_fields={"payment_id": "overwritten"}),
    )

    assert outcome == UpdateOutcome.PREDICATE_FAILED
    assert (await codes.get("ABC"))["payment_id"] == "pi_1"


async def test_conditional_update_missing_key(codes):
    outcome = await codes.conditional_update(
        "missing", {"used": False}, Mutation(set_fields={"used": True}),
    )
    assert outcome == UpdateOutcome.NOT_FOUND


async def test_list_documents_ordering(codes):
    for i, code in enumerate(["A", "B", "C"]):
        await codes.create(code, signup_code_doc(created_at=T0 + timedelta(minutes=i)))

    newest_first = await codes.list_documents("created_at", descending=True)
    oldest_first = await codes.list_documents("created_at")

    assert [d["code"] for d in newest_first] == ["C", "B", "A"]
    assert [d["code"] for d in oldest_first] == ["A", "B", "C"]


async def test_append_commits_with_guarded_fields(projects):
    await projects.create("p-1", new_project_document("p-1", "Logo", None, T0))

    outcome = await projects.conditional_update(
        "p-1",
        {"current_phase": "DISCOVERY"},
        Mutation(
            set_fields={"current_phase": "DESIGN", "updated_at": T0},
            append={"phase_history": {"phase": "DESIGN", "entered_at": T0}},
        ),
    )

    assert outcome == UpdateOutcome.COMMITTED
    doc = await projects.get("p-1")
    assert doc["current_phase"] == "DESIGN"
    assert [e["phase"] for e in doc["phase_history"]] == ["DESIGN"]


async def test_append_skipped_when_predicate_fails(projects):
    await projects.create("p-1", new_project_document("p-1", "Logo", None, T0))

    outcome = await projects.conditional_update(
        "p-1",
        {"current_phase": "DESIGN"},
        Mutation(
            set_fields={"current_phase": "REVISIONS"},
            append={"phase_history": {"phase": "REVISIONS", "entered_at": T0}},
        ),
    )

    assert outcome == UpdateOutcome.PREDICATE_FAILED
    doc = await projects.get("p-1")
    assert doc["current_phase"] == "DISCOVERY"
    assert doc["phase_history"] == []


async def test_sql_store_rejects_unknown_append_field(sql_signup_store):
    await sql_signup_store.create("ABC", signup_code_doc())
    with pytest.raises(ValueError):
        await sql_signup_store.conditional_update(
            "ABC", {}, Mutation(set_fields={"used": True}, append={"notes": {}}),
        )
    assert (await sql_signup_store.get("ABC"))["used"] is False


async def test_sql_store_health_check(sql_signup_store):
    assert await sql_signup_store.health_check() is True


# --- bundle readiness ------------------------------------------------------------

async def test_memory_bundle_is_healthy():
    assert await memory_stores().health_check() is True


async def test_bundle_reports_unhealthy_store(monkeypatch):
    stores = memory_stores()

    async def down():
        return False

    monkeypatch.setattr(stores.projects, "health_check", down)

    assert await stores.health_check() is False


async def test_sql_bundle_checks_the_engine(sql_db):
    assert await sql_stores(sql_db).health_check() is True


def test_clock_is_timezone_aware():
    assert utc_now().tzinfo is not None
