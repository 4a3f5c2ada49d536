"""
작업 세트 스토어 테스트 (칸반 이동, 주문 등록, 샌드박스)
"""

from __future__ import annotations

import pandas as pd
import pytest

from pump_tracker.application import LIVE, STAGED, PumpStore, SandboxState
from pump_tracker.core.config import RemoteConnection
from pump_tracker.data_sources import Backends
from pump_tracker.domain.exceptions import PersistenceError
from pump_tracker.domain.models import OrderLine, Pump, PurchaseOrder
from pump_tracker.domain.stages import Stage
from pump_tracker.domain.wip import WipPolicy

CONNECTION = RemoteConnection(url="https://docs.google.com/spreadsheets/d/test", key={"type": "service_account"})


@pytest.fixture
def local(recording_adapter, sample_pumps):
    return recording_adapter(sample_pumps)


@pytest.fixture
def store(local, fixed_clock):
    """확인 없이 커밋하는 로컬 스토어"""
    store = PumpStore(
        Backends(local=local),
        require_commit_confirmation=False,
        clock=fixed_clock,
    )
    store.load()
    return store


# ============================================================
# 조회 / 칸반 이동
# ============================================================

def test_load_and_counts(store):
    assert [p.id for p in store.pumps] == ["p1", "p2", "p3"]
    counts = store.counts_by_stage()
    assert counts[Stage.QUEUE] == 1
    assert counts[Stage.FABRICATION] == 1
    assert counts[Stage.ASSEMBLY] == 1
    assert counts[Stage.SHIP] == 0
    assert store.count_in_stage(Stage.FABRICATION, exclude_id="p2") == 0


def test_move_stage_accepted_is_saved(store, local):
    outcome = store.move_stage("p1", "FABRICATION")

    assert outcome.accepted
    moved = store.get("p1")
    assert moved.stage == Stage.FABRICATION
    assert moved.last_update == pd.Timestamp("2024-01-10 09:00:00").isoformat()
    assert local.saved == [moved]


def test_move_stage_rejected_by_wip_limit(local, fixed_clock):
    store = PumpStore(
        Backends(local=local),
        wip_policy=WipPolicy({Stage.FABRICATION: 1}),
        clock=fixed_clock,
    )
    store.load()
    before = store.get("p1")

    outcome = store.move_stage("p1", Stage.FABRICATION)

    assert not outcome.accepted
    assert outcome.reason == "wip_limit"
    assert outcome.stage == Stage.FABRICATION
    assert store.get("p1") == before
    assert local.saved == []


def test_move_stage_requires_serial(store, local):
    outcome = store.move_stage("p1", Stage.POWDER_COAT)

    assert outcome.reason == "serial_required"
    assert store.get("p1").stage == Stage.QUEUE
    assert local.saved == []


def test_move_stage_unknown_pump(store):
    outcome = store.move_stage("missing", Stage.SHIP)

    assert not outcome.accepted
    assert outcome.reason == "not_found"


def test_move_to_same_stage_writes_nothing(store, local):
    assert store.move_stage("p2", Stage.FABRICATION).accepted
    assert local.saved == []


def test_failed_save_leaves_working_set_unchanged(recording_adapter, sample_pumps, fixed_clock):
    local = recording_adapter(sample_pumps, fail_on=["save"])
    store = PumpStore(Backends(local=local), clock=fixed_clock)
    store.load()

    with pytest.raises(PersistenceError):
        store.move_stage("p1", Stage.FABRICATION)

    assert store.get("p1").stage == Stage.QUEUE


def test_update_pump_unknown_id(store):
    assert store.update_pump("missing", priority="Rush") is None


def test_add_purchase_order(store, local):
    order = PurchaseOrder(
        po="PO-300",
        customer="Gamma",
        promise_date="2024-02-15",
        lines=(
            OrderLine(model="DD-4", quantity=2, color="Red", value_each=1000.0),
            OrderLine(model="HC-8", quantity=1, promise_date="2024-03-01"),
        ),
    )

    created = store.add_purchase_order(order)

    assert len(created) == 3
    assert all(p.stage == Stage.QUEUE and p.po == "PO-300" for p in created)
    assert [p.promise_date for p in created] == ["2024-02-15", "2024-02-15", "2024-03-01"]
    assert len({p.id for p in created}) == 3
    assert len(store.pumps) == 6
    assert local.saved == created


def test_add_purchase_order_partial_failure_keeps_saved_pumps(recording_adapter, sample_pumps, fixed_clock):
    """두 번째 저장에서 실패해도 이미 저장된 펌프는 작업 세트에 남음"""
    local = recording_adapter(sample_pumps, save_limit=1)
    store = PumpStore(Backends(local=local), clock=fixed_clock)
    store.load()
    order = PurchaseOrder(po="PO-400", customer="Delta", lines=(OrderLine(model="DD-4", quantity=3),))

    with pytest.raises(PersistenceError):
        store.add_purchase_order(order)

    assert len(local.saved) == 1
    assert len(store.pumps) == 4
    assert store.get(local.saved[0].id) == local.saved[0]
    assert {p.id for p in store.pumps} == {p.id for p in local.rows}


def test_timeline_helpers(store, unit_durations):
    blocks = store.timeline_for("p3", unit_durations, start_date="2024-01-01")

    assert [b.stage for b in blocks] == [Stage.ASSEMBLY, Stage.SHIP]
    assert store.timeline_for("missing", unit_durations) == []
    assert store.timelines({"DD-4": unit_durations}.get) == {}
    assert sorted(store.timelines({"DD-4": unit_durations}.get, scheduled_only=False)) == ["p1", "p2"]


# ============================================================
# 샌드박스
# ============================================================

def test_sandbox_state_invariant():
    assert SandboxState().mode == LIVE
    assert SandboxState.staged([]).mode == STAGED
    with pytest.raises(ValueError):
        SandboxState(is_sandbox=True)
    with pytest.raises(ValueError):
        SandboxState(is_sandbox=False, original_snapshot=[])


def test_enter_sandbox_switches_adapter(store, local):
    assert store.enter_sandbox()

    assert store.is_sandbox
    assert store.adapter is store.backends.sandbox
    assert store.sandbox.original_snapshot == store.pumps


def test_enter_sandbox_twice_is_noop(store):
    store.enter_sandbox()
    snapshot = store.sandbox.original_snapshot
    store.move_stage("p1", Stage.FABRICATION)

    assert not store.enter_sandbox()
    assert store.sandbox.original_snapshot is snapshot


def test_staged_writes_never_reach_real_backend(store, local):
    store.enter_sandbox()

    store.move_stage("p1", Stage.FABRICATION)
    store.add_purchase_order(PurchaseOrder(po="PO-9", customer="X", lines=(OrderLine(model="DD-4"),)))

    assert local.saved == []
    assert local.replaced == []
    sandbox_rows = {p.id: p for p in store.backends.sandbox.load()}
    assert sandbox_rows["p1"].stage == Stage.FABRICATION
    assert len(sandbox_rows) == 4


def test_exit_sandbox_restores_snapshot(store, local, sample_pumps):
    store.enter_sandbox()
    store.move_stage("p1", Stage.FABRICATION)
    store.update_pump("p3", priority="Normal")

    assert store.exit_sandbox()

    assert store.pumps == sample_pumps
    assert not store.is_sandbox
    assert store.sandbox.original_snapshot is None
    assert store.adapter is local
    assert local.saved == []
    assert local.replaced == []


def test_commit_sandbox_writes_working_set(store, local):
    store.enter_sandbox()
    store.move_stage("p1", Stage.FABRICATION)
    staged = store.pumps

    assert store.commit_sandbox()

    assert local.replaced == [staged]
    assert store.pumps == staged
    assert not store.is_sandbox
    assert store.adapter is local


def test_commit_goes_to_remote_when_configured(recording_adapter, sample_pumps, fixed_clock):
    local = recording_adapter()
    remote = recording_adapter(sample_pumps)
    store = PumpStore(
        Backends(local=local, remote=remote),
        CONNECTION,
        require_commit_confirmation=False,
        clock=fixed_clock,
    )
    store.load()
    store.enter_sandbox()
    store.move_stage("p1", Stage.FABRICATION)

    store.commit_sandbox()

    assert len(remote.replaced) == 1
    assert {p.id: p.stage for p in remote.replaced[0]}["p1"] == Stage.FABRICATION
    assert local.replaced == []
    assert store.adapter is remote


def test_commit_requires_confirmation(local, fixed_clock):
    store = PumpStore(Backends(local=local), clock=fixed_clock)
    store.load()
    store.enter_sandbox()

    assert not store.commit_sandbox()
    assert not store.commit_sandbox(confirm=lambda: False)
    assert store.is_sandbox
    assert local.replaced == []

    assert store.commit_sandbox(confirm=lambda: True)
    assert not store.is_sandbox
    assert len(local.replaced) == 1


def test_commit_failure_stays_staged(recording_adapter, sample_pumps, fixed_clock):
    local = recording_adapter(sample_pumps, fail_on=["replace_all"])
    store = PumpStore(Backends(local=local), require_commit_confirmation=False, clock=fixed_clock)
    store.load()
    store.enter_sandbox()
    store.move_stage("p1", Stage.FABRICATION)

    with pytest.raises(PersistenceError):
        store.commit_sandbox()

    assert store.is_sandbox
    assert store.adapter is store.backends.sandbox
    assert store.sandbox.original_snapshot == sample_pumps
    assert store.get("p1").stage == Stage.FABRICATION


def test_commit_and_exit_are_noops_when_live(store, local):
    assert not store.commit_sandbox()
    assert not store.exit_sandbox()
    assert local.replaced == []
    assert store.adapter is local
