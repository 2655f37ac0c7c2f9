# file: orgdesk_runtime/test_loader.py
"""
Organisation Dashboard Runtime — Initial Load / Gateway Tests

Scenario:
  Phase 1: empty store loads with default singletons
  Phase 2: one collection fetch fails → aggregated error, no snapshot
  Phase 3: retry re-issues every fetch and succeeds
  Phase 4: failed reload keeps the current snapshot
  Phase 5: gateway key normalisation and error strings

Run:  python -m orgdesk_runtime.test_loader
"""

from __future__ import annotations

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orgdesk_kernel.domain_types import Department, EmailFormat
from orgdesk_kernel.registry import COLLECTIONS, SINGLETONS
from orgdesk_kernel.state import DEFAULT_APP_SETTINGS, DEFAULT_COMPANY_PROFILE

from orgdesk_runtime.gateway import NOT_FOUND, RemoteGateway
from orgdesk_runtime.loader import InitialLoadReconciler, LoadStatus
from orgdesk_runtime.record_store import MemoryRecordStore
from orgdesk_runtime.session import DashboardSession, SessionNotReadyError


def _header(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


# ══════════════════════════════════════════════════════════════
# Initial load
# ══════════════════════════════════════════════════════════════

def test_empty_store_loads_defaults() -> None:
    _header("Phase 1 -- Empty store loads with default singletons")
    store = MemoryRecordStore()
    reconciler = InitialLoadReconciler(RemoteGateway(store))
    assert reconciler.status == LoadStatus.LOADING

    status = asyncio.run(reconciler.load())

    assert status == LoadStatus.READY
    state = reconciler.state
    assert state.departments == () and state.users == ()
    assert state.app_settings == DEFAULT_APP_SETTINGS
    assert state.company_profile == DEFAULT_COMPANY_PROFILE
    assert store.count_calls("select_all") == len(COLLECTIONS) == 13
    assert store.count_calls("first") == len(SINGLETONS) == 2
    print("  [PASS]")


def test_singleton_rows_are_used_when_present() -> None:
    _header("Phase 1b -- Existing singleton rows replace the defaults")
    store = MemoryRecordStore()
    store.seed("app_settings", [{
        "email_domain": "acme.test", "email_format": "F.lastname", "max_manager_grade_level": 2,
    }])
    store.seed("department", [{"id": "d1", "name": "Ops", "uid": "007"}])
    reconciler = InitialLoadReconciler(RemoteGateway(store))

    asyncio.run(reconciler.load())

    settings = reconciler.state.app_settings
    assert settings.email_format == EmailFormat.F_LASTNAME
    assert settings.max_manager_grade_level == 2
    assert settings.id
    assert reconciler.state.departments == (Department("d1", "Ops", uid="007"),)
    print("  [PASS]")


def test_one_fetch_fails_then_retry() -> None:
    _header("Phase 2/3 -- 12 of 13 fetches succeed, then retry")
    store = MemoryRecordStore()
    store.seed("department", [{"id": "d1", "name": "Ops"}])
    store.fail("select_all", "workflow", error="timeout")
    session = DashboardSession(RemoteGateway(store))

    status = asyncio.run(session.start())

    assert status == LoadStatus.FAILED
    assert not session.ready
    assert session.error == "Failed to load: workflows: timeout"
    try:
        session.store
    except SessionNotReadyError as exc:
        assert exc.status == LoadStatus.FAILED
        assert "workflows" in str(exc)
    else:
        raise AssertionError("store must not exist after a failed load")
    assert not hasattr(session, "departments")

    store.reset_calls()
    status = asyncio.run(session.retry())

    assert status == LoadStatus.READY
    assert store.count_calls("select_all") == 13
    assert store.count_calls("first") == 2
    assert session.error is None
    assert [d.name for d in session.state.departments] == ["Ops"]
    print("  [PASS]")


def test_every_failure_is_reported() -> None:
    _header("Phase 2b -- Several failures fold into one message")
    store = MemoryRecordStore()
    store.fail("select_all", "staff", error="denied")
    store.fail("first", "company_profile", error="gone")
    reconciler = InitialLoadReconciler(RemoteGateway(store))

    asyncio.run(reconciler.load())

    assert reconciler.status == LoadStatus.FAILED
    assert reconciler.state is None
    assert reconciler.error.startswith("Failed to load: ")
    assert "staff: denied" in reconciler.error
    assert "company profile: gone" in reconciler.error
    assert reconciler.attempts == 1
    print("  [PASS]")


def test_failed_reload_keeps_snapshot() -> None:
    _header("Phase 4 -- Failed reload keeps the current snapshot")
    store = MemoryRecordStore()
    store.seed("grade", [{"id": "g1", "level": 1, "name": "Manager"}])
    session = DashboardSession(RemoteGateway(store))
    asyncio.run(session.start())
    before = session.state

    store.fail("select_all", "grade")
    status = asyncio.run(session.reload())

    assert status == LoadStatus.FAILED
    assert session.ready
    assert session.state is before
    assert "grades" in session.error

    store.seed("grade", [{"id": "g2", "level": 2, "name": "Lead"}])
    assert asyncio.run(session.reload()) == LoadStatus.READY
    assert [g.id for g in session.state.grades] == ["g1", "g2"]
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Gateway
# ══════════════════════════════════════════════════════════════

def test_gateway_normalises_keys() -> None:
    _header("Phase 5 -- Gateway accepts either key convention")
    store = MemoryRecordStore()
    gateway = RemoteGateway(store)

    result = asyncio.run(gateway.create_one("staff", {
        "firstName": "Ada", "lastName": "Lovelace", "departmentId": "d1",
        "primaryFunctionId": "f1", "additionalFunctionIds": ["f2"], "id": "ignored",
    }))

    assert result.ok, result.error
    assert result.data.first_name == "Ada"
    assert result.data.additional_function_ids == ("f2",)
    assert result.data.id != "ignored"
    row = store.rows("staff")[0]
    assert "first_name" in row and "firstName" not in row

    store.seed("department", [{"id": "d9", "name": "Legacy", "managerId": "s1"}])
    listed = asyncio.run(gateway.list_all("department"))
    assert listed.data[0].manager_id == "s1"
    print("  [PASS]")


def test_gateway_errors_are_strings() -> None:
    _header("Phase 5b -- Gateway failures come back as error strings")
    store = MemoryRecordStore()
    gateway = RemoteGateway(store)

    missing = asyncio.run(gateway.update_one("grade", "nope", {"name": "X"}))
    assert not missing.ok and missing.error == NOT_FOUND

    store.fail("delete", "grade", error="locked")
    assert asyncio.run(gateway.delete_one("grade", "g1")) == "locked"
    assert asyncio.run(gateway.delete_one("grade", "g1")) is None

    empty = asyncio.run(gateway.create_many("team_member", []))
    assert empty.ok and empty.data == ()
    assert store.count_calls("insert_many") == 0

    store.fail("insert_many", "workflow_step", unexpected=True, error="driver crashed")
    crashed = asyncio.run(gateway.create_many("workflow_step", [
        {"workflow_id": "w1", "responsibility_id": "r1", "step_order": 1},
    ]))
    assert crashed.error == "driver crashed"
    assert store.rows("workflow_step") == []

    dupes = asyncio.run(gateway.create_many("company_number", [
        {"phone_number": "01"}, {"phone_number": "01"},
    ]))
    assert not dupes.ok and "unique" in dupes.error
    assert store.rows("company_number") == []
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Runner
# ══════════════════════════════════════════════════════════════

def main() -> None:
    tests = [
        test_empty_store_loads_defaults,
        test_singleton_rows_are_used_when_present,
        test_one_fetch_fails_then_retry,
        test_every_failure_is_reported,
        test_failed_reload_keeps_snapshot,
        test_gateway_normalises_keys,
        test_gateway_errors_are_strings,
    ]
    failed = 0
    for fn in tests:
        try:
            fn()
        except Exception as e:
            print(f"\n[ERROR] {fn.__name__}: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print(f"\n{'='*60}")
    print(f"  RESULTS: {len(tests) - failed}/{len(tests)} tests passed")
    print(f"{'='*60}")
    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    main()
