"""Tests for MetricsAggregator."""
from __future__ import annotations

import pytest

from faas_sim.metrics.collector import MetricsAggregator, raw_wait_time, wait_time
from faas_sim.sim.engine import RECORD_COLUMNS, CompletionRecord


def _rec(job_id, tenant, start, finish, vm=0, length=1000, exec_time=None):
    return CompletionRecord(
        job_id=job_id,
        status="SUCCESS",
        vm_id=vm,
        start_time=start,
        finish_time=finish,
        exec_time=(finish - start) if exec_time is None else exec_time,
        tenant_id=tenant,
        length=length,
    )


def _agg(**runs):
    mc = MetricsAggregator()
    for policy, records in runs.items():
        mc.add_run(policy, records)
    return mc


# -------------------------------------------------------------------------
# Wait time
# -------------------------------------------------------------------------

def test_wait_time_zero_for_consistent_record():
    assert wait_time(_rec(0, 0, 0.0, 4.0)) == 0.0


def test_negative_epsilon_wait_is_clamped():
    r = _rec(0, 0, 0.1, 0.3, exec_time=0.2000000001)
    assert raw_wait_time(r) < 0
    assert wait_time(r) == 0.0


def test_positive_wait_kept():
    r = _rec(0, 0, 0.0, 5.0, exec_time=3.0)
    assert wait_time(r) == pytest.approx(2.0)


# -------------------------------------------------------------------------
# Per-tenant summary
# -------------------------------------------------------------------------

def test_tenant_summary_totals_and_averages():
    mc = _agg(SJF=[
        _rec(0, 0, 0.0, 2.0),
        _rec(1, 0, 0.0, 4.0),
        _rec(2, 1, 0.0, 3.0),
    ])
    summary = mc.tenant_summary("SJF")
    assert list(summary) == [0, 1]
    assert summary[0].jobs == 2
    assert summary[0].total_exec == pytest.approx(6.0)
    assert summary[0].avg_exec == pytest.approx(3.0)
    assert summary[1].avg_wait == pytest.approx(0.0)


def test_raw_wait_tracked_separately():
    mc = _agg(RoundRobin=[_rec(0, 0, 0.0, 1.0, exec_time=1.0 + 1e-12)])
    s = mc.tenant_summary("RoundRobin")[0]
    assert s.total_wait == 0.0
    assert s.total_raw_wait < 0


def test_tenants_union_across_runs():
    mc = _agg(A=[_rec(0, 2, 0, 1)], B=[_rec(0, 0, 0, 1), _rec(1, 1, 0, 1)])
    assert mc.tenants() == [0, 1, 2]


# -------------------------------------------------------------------------
# Ranking
# -------------------------------------------------------------------------

def test_rank_policies_ascending_total():
    mc = _agg(
        RoundRobin=[_rec(0, 0, 0, 10)],
        SJF=[_rec(0, 0, 0, 7)],
        TenantAware=[_rec(0, 0, 0, 9)],
    )
    assert [p for p, _ in mc.rank_policies()] == ["SJF", "TenantAware", "RoundRobin"]
    assert mc.best_policy() == "SJF"


def test_rank_ties_broken_lexically_regardless_of_insertion():
    mc = _agg(TenantAware=[_rec(0, 0, 0, 5)], RoundRobin=[_rec(0, 0, 0, 5)])
    assert mc.best_policy() == "RoundRobin"


def test_best_policy_for_tenant():
    mc = _agg(
        RoundRobin=[_rec(0, 0, 0, 4), _rec(1, 1, 0, 2)],
        SJF=[_rec(0, 0, 0, 3), _rec(1, 1, 0, 6)],
    )
    assert mc.best_policy_for_tenant(0) == "SJF"
    assert mc.best_policy_for_tenant(1) == "RoundRobin"


def test_best_policy_for_tenant_tie_is_lexical():
    mc = _agg(TenantAware=[_rec(0, 0, 0, 4)], SJF=[_rec(0, 0, 0, 4)])
    assert mc.best_policy_for_tenant(0) == "SJF"


def test_best_policy_for_unknown_tenant_is_none():
    mc = _agg(SJF=[_rec(0, 0, 0, 4)])
    assert mc.best_policy_for_tenant(7) is None


def test_empty_aggregator():
    mc = MetricsAggregator()
    assert mc.rank_policies() == []
    assert mc.best_policy() is None


def test_duplicate_run_rejected():
    mc = _agg(SJF=[])
    with pytest.raises(ValueError, match="Duplicate policy run"):
        mc.add_run("SJF", [])


# -------------------------------------------------------------------------
# Jain's Fairness Index
# -------------------------------------------------------------------------

def test_jain_fairness_equal_tenants():
    mc = _agg(X=[_rec(0, 0, 0, 5), _rec(1, 1, 0, 5), _rec(2, 2, 0, 5)])
    assert mc.jain_fairness("X") == pytest.approx(1.0)


def test_jain_fairness_unequal_tenants_less_than_one():
    mc = _agg(X=[_rec(0, 0, 0, 9), _rec(1, 1, 0, 1)])
    jain = mc.jain_fairness("X")
    assert 0.0 < jain < 1.0


def test_jain_fairness_returns_none_when_empty():
    mc = _agg(X=[])
    assert mc.jain_fairness("X") is None


# -------------------------------------------------------------------------
# DataFrame export
# -------------------------------------------------------------------------

def test_to_frame_columns_and_rounding():
    mc = _agg(SJF=[_rec(0, 1, 0.0, 1.23456, vm=2, length=4321)])
    df = mc.to_frame()
    assert list(df.columns) == [*RECORD_COLUMNS, "Length", "policy"]
    row = df.iloc[0]
    assert row["FinishTime"] == pytest.approx(1.23)
    assert row["VMId"] == 2
    assert row["TenantID"] == 1
    assert row["Length"] == 4321
    assert row["policy"] == "SJF"


def test_to_frame_empty():
    df = MetricsAggregator().to_frame()
    assert df.empty
