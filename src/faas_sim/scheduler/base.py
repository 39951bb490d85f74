from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from faas_sim.sim.engine import Job


class SchedulingPolicy(ABC):
    """Orders pending jobs before they are bound to VMs; never mutates its input."""

    name: str = ""

    @abstractmethod
    def order_jobs(self, jobs: Sequence[Job]) -> List[Job]:
        ...

    def __call__(self, jobs: Sequence[Job]) -> List[Job]:
        return self.order_jobs(jobs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
