from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Sequence

from faas_sim.sim.engine import Job
from faas_sim.scheduler.base import SchedulingPolicy


class TenantAwarePolicy(SchedulingPolicy):
    """
    Per-tenant interleaving.

    Jobs are grouped by tenant (keeping each tenant's own order), then emitted
    one per tenant per round, visiting tenants in ascending id order.  Tenants
    whose queue runs dry simply drop out of later rounds.

    So no tenant gets more than one job ahead of another tenant's next job:
    tenant B's k-th job always precedes tenant A's (k+1)-th.
    """

    name = "TenantAware"

    def order_jobs(self, jobs: Sequence[Job]) -> List[Job]:
        queues: Dict[int, Deque[Job]] = {}  # tenant_id -> FIFO queue
        for job in jobs:
            queues.setdefault(job.tenant_id, deque()).append(job)

        rotation = sorted(queues)
        ordered: List[Job] = []
        while len(ordered) < len(jobs):
            for tenant in rotation:
                q = queues[tenant]
                if q:
                    ordered.append(q.popleft())
        return ordered
