from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from faas_sim.sim.engine import Job

# Remaining work below this fraction of a job's length counts as done.
FINISH_TOLERANCE = 1e-9


class TimeSharedScheduler:
    """
    Processor-sharing execution of the jobs resident on one VM.

    Every resident job runs at once.  With ``d`` PEs demanded by resident jobs
    on a VM of ``P`` PEs at ``M`` MIPS each, one demanded PE progresses at
    ``M * P / max(d, P)`` instructions per second: a job never runs faster than
    the PEs it asked for, and the VM is never oversubscribed.

    State is brought forward lazily by ``update(now)``, which drains each job's
    remaining instructions at its share over the elapsed interval.  Any change
    to the resident set bumps ``version`` so completion predictions made under
    the old sharing can be recognised as stale.
    """

    def __init__(self, vm):
        self.vm = vm
        self._jobs: Dict[int, Job] = {}
        self._remaining: Dict[int, float] = {}
        self.last_update: float = 0.0
        self.version: int = 0
        # (t0, t1, instructions completed by all resident jobs in [t0, t1])
        self.trace: List[Tuple[float, float, float]] = []

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> float:
        return float(self.vm.mips * self.vm.pes)

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: int) -> bool:
        return job_id in self._jobs

    def rate_per_pe(self) -> float:
        demand = sum(j.pes_required for j in self._jobs.values())
        if demand == 0:
            return 0.0
        return self.capacity / max(demand, self.vm.pes)

    def rate(self, job: Job) -> float:
        """Instructions per second ``job`` currently receives."""
        return self.rate_per_pe() * job.pes_required

    def remaining(self, job_id: int) -> float:
        return self._remaining[job_id]

    # ------------------------------------------------------------------
    # Time advance
    # ------------------------------------------------------------------

    def update(self, now: float) -> None:
        dt = now - self.last_update
        if dt < 0:
            raise ValueError("Time went backwards")
        if dt > 0 and self._jobs:
            per_pe = self.rate_per_pe()
            done = 0.0
            for job_id, job in self._jobs.items():
                work = min(self._remaining[job_id], per_pe * job.pes_required * dt)
                self._remaining[job_id] -= work
                done += work
            self.trace.append((self.last_update, now, done))
        self.last_update = now

    def admit(self, job: Job, now: float) -> None:
        if job.job_id in self._jobs:
            raise ValueError(f"Job {job.job_id} already resident on vm {self.vm.vm_id}")
        self.update(now)
        self._jobs[job.job_id] = job
        self._remaining[job.job_id] = float(job.length)
        self.version += 1

    def next_completion(self) -> Optional[Tuple[float, Job]]:
        """Earliest ``(time, job)`` to finish if the resident set stays unchanged."""
        if not self._jobs:
            return None
        per_pe = self.rate_per_pe()
        best: Optional[Tuple[float, int]] = None
        for job_id, job in self._jobs.items():
            left = self._remaining[job_id] / (per_pe * job.pes_required)
            if best is None or (left, job_id) < best:
                best = (left, job_id)
        left, job_id = best
        return self.last_update + left, self._jobs[job_id]

    def collect_finished(self, now: float, expected: Optional[int] = None) -> List[Job]:
        """
        Advance to ``now`` and remove every job whose work is done.

        ``expected`` is the job a completion event was predicted for; it is
        treated as done even if rounding left a sliver of work.
        """
        self.update(now)
        if expected is not None and expected in self._remaining:
            self._remaining[expected] = 0.0

        finished = [
            job for job_id, job in self._jobs.items()
            if self._remaining[job_id] <= FINISH_TOLERANCE * job.length
        ]
        for job in finished:
            del self._jobs[job.job_id]
            del self._remaining[job.job_id]
        if finished:
            self.version += 1
        return sorted(finished, key=lambda j: j.job_id)
