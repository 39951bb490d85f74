from __future__ import annotations

from typing import List, Sequence

from faas_sim.sim.engine import Job
from faas_sim.scheduler.base import SchedulingPolicy


class ShortestJobFirstPolicy(SchedulingPolicy):
    """
    Shortest-job-first using instruction length as the key.
    Equal lengths keep their submission order (``sorted`` is stable).
    """

    name = "SJF"

    def order_jobs(self, jobs: Sequence[Job]) -> List[Job]:
        return sorted(jobs, key=lambda job: job.length)
