from __future__ import annotations

from typing import List, Sequence

from faas_sim.sim.engine import Job
from faas_sim.scheduler.base import SchedulingPolicy


class RoundRobinPolicy(SchedulingPolicy):
    """
    Creation-order submission.

    The ordering is the identity; the round-robin behaviour comes from the
    engine binding the k-th submitted job to VM ``k mod vm_count``.
    """

    name = "RoundRobin"

    def order_jobs(self, jobs: Sequence[Job]) -> List[Job]:
        return list(jobs)
