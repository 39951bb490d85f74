"""
Per-policy simulation runs.

Each run gets its own cluster, its own copy of the jobs and its own engine, so
runs can go in parallel threads and a failing run cannot disturb the others.
"""
from __future__ import annotations

import copy
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from loguru import logger

from faas_sim.cluster.cluster import build_cluster
from faas_sim.errors import SimulationError
from faas_sim.scheduler.registry import get_policy
from faas_sim.sim.engine import CompletionRecord, Job, SimEngine


@dataclass
class RunResult:
    policy: str
    records: List[CompletionRecord] = field(default_factory=list)
    sim_end_time: float = 0.0
    error: Optional[SimulationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_policy(
    policy_name: str,
    jobs: Sequence[Job],
    cluster_kwargs: Mapping[str, Any],
) -> RunResult:
    """
    Simulate ``jobs`` under one policy on a freshly built cluster.

    ``jobs`` is deep-copied first; the caller's list is never touched.
    Raises ``SimulationError`` subclasses on a bad policy, cluster or workload.
    """
    policy = get_policy(policy_name)
    cluster = build_cluster(**cluster_kwargs)
    ordered = policy.order_jobs(copy.deepcopy(list(jobs)))

    logger.info(f"Starting simulation with {policy.name} ({len(ordered)} jobs, "
                f"{len(cluster.vms)} VMs)")
    engine = SimEngine()
    engine.run(jobs=ordered, cluster=cluster)
    records = engine.drain()
    logger.info(f"Simulation for {policy.name} completed at t={engine.time:.2f}")

    return RunResult(policy=policy_name, records=records, sim_end_time=engine.time)


def _run_isolated(policy_name: str, jobs: Sequence[Job], cluster_kwargs: Mapping[str, Any]) -> RunResult:
    try:
        return run_policy(policy_name, jobs, cluster_kwargs)
    except SimulationError as exc:
        logger.warning(f"Run for {policy_name} failed: {exc}")
        return RunResult(policy=policy_name, error=exc)


def run_all(
    policy_names: Iterable[str],
    jobs: Sequence[Job],
    cluster_kwargs: Mapping[str, Any],
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> Dict[str, RunResult]:
    """
    Run every policy against the same job set.

    Results are keyed by policy name in the order given.  A failed run shows
    up with ``error`` set and no records; the remaining runs still happen.
    Raises ``ValueError`` if a policy name is given twice.
    """
    names = list(policy_names)
    seen = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate policy run: {name}")
        seen.add(name)

    if parallel and len(names) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(_run_isolated, n, jobs, cluster_kwargs) for n in names]
            results = [f.result() for f in futures]
    else:
        results = [_run_isolated(n, jobs, cluster_kwargs) for n in names]

    return {r.policy: r for r in results}
