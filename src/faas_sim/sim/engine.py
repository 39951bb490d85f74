from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import heapq

from loguru import logger

from faas_sim.errors import InvalidWorkload


class JobStatus(str, Enum):
    CREATED = "CREATED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


# Allowed forward transitions; FINISHED is terminal.
_NEXT_STATUS = {
    JobStatus.CREATED: JobStatus.QUEUED,
    JobStatus.QUEUED: JobStatus.RUNNING,
    JobStatus.RUNNING: JobStatus.FINISHED,
}


@dataclass(order=True)
class Event:
    time: float
    seq: int
    kind: str = field(compare=False)
    job_id: Optional[int] = field(default=None, compare=False)
    vm_id: Optional[int] = field(default=None, compare=False)
    version: int = field(default=0, compare=False)


# Descriptor fields fixed once the job is constructed.
_FIXED_FIELDS = frozenset({"job_id", "length", "tenant_id", "pes_required"})


@dataclass
class Job:
    """
    A cloudlet: ``length`` instructions of work owned by one tenant.

    Identity, size and tenant are fixed at creation; only the lifecycle
    fields below change, and only through the ``mark_*`` transitions.
    """

    job_id: int
    length: int
    tenant_id: int = 0
    pes_required: int = 1
    file_size: int = 300      # carried for reporting, ignored for timing
    output_size: int = 300
    arrival_time: float = 0.0

    # Filled by simulator
    status: JobStatus = JobStatus.CREATED
    vm_id: Optional[int] = None
    start_time: Optional[float] = None
    finish_time: Optional[float] = None

    def __setattr__(self, name, value):
        if name in _FIXED_FIELDS and name in self.__dict__:
            raise AttributeError(f"Job.{name} is fixed at creation")
        super().__setattr__(name, value)

    def _advance(self, new: JobStatus) -> None:
        if _NEXT_STATUS.get(self.status) is not new:
            raise RuntimeError(
                f"Job {self.job_id}: illegal transition {self.status.value} -> {new.value}"
            )
        self.status = new

    def mark_queued(self, vm_id: int) -> None:
        self._advance(JobStatus.QUEUED)
        self.vm_id = vm_id

    def mark_running(self, now: float) -> None:
        self._advance(JobStatus.RUNNING)
        self.start_time = now

    def mark_finished(self, now: float) -> None:
        self._advance(JobStatus.FINISHED)
        self.finish_time = now

    @property
    def exec_time(self) -> Optional[float]:
        if self.start_time is None or self.finish_time is None:
            return None
        return self.finish_time - self.start_time


RECORD_COLUMNS = (
    "CloudletID", "Status", "VMId", "StartTime", "FinishTime", "ExecTime", "TenantID",
)


@dataclass(frozen=True)
class CompletionRecord:
    job_id: int
    status: str
    vm_id: int
    start_time: float
    finish_time: float
    exec_time: float
    tenant_id: int
    length: int

    @classmethod
    def from_job(cls, job: Job) -> "CompletionRecord":
        return cls(
            job_id=job.job_id,
            status="SUCCESS",
            vm_id=job.vm_id,
            start_time=job.start_time,
            finish_time=job.finish_time,
            exec_time=job.finish_time - job.start_time,
            tenant_id=job.tenant_id,
            length=job.length,
        )

    def as_row(self) -> Tuple:
        """Report row matching ``RECORD_COLUMNS``; times rounded to 2 dp."""
        return (
            self.job_id,
            self.status,
            self.vm_id,
            round(self.start_time, 2),
            round(self.finish_time, 2),
            round(self.exec_time, 2),
            self.tenant_id,
        )


class SimEngine:
    """
    Discrete-event clock driving time-shared execution of jobs on VMs.

    Event types:
      - "ARRIVE": job is admitted to its bound VM and starts sharing capacity
      - "FINISH": predicted completion on a VM; stale predictions are skipped

    Jobs are bound to VMs cyclically in the order they are submitted, so the
    scheduling policy decides placement only through the order it produces.
    """

    def __init__(self):
        self.time: float = 0.0
        self._seq: int = 0
        self._pq: List[Event] = []  # priority queue of events
        self.jobs: Dict[int, Job] = {}
        self._vms: Dict[int, object] = {}

    def schedule_event(
        self,
        time: float,
        kind: str,
        job_id: Optional[int] = None,
        vm_id: Optional[int] = None,
        version: int = 0,
    ) -> None:
        self._seq += 1
        heapq.heappush(
            self._pq,
            Event(time=time, seq=self._seq, kind=kind, job_id=job_id, vm_id=vm_id, version=version),
        )

    def _validate(self, jobs: List[Job], vms: list) -> None:
        if not vms:
            raise InvalidWorkload("VM pool is empty")
        for vm in vms:
            if vm.total_mips <= 0:
                raise InvalidWorkload(f"VM {vm.vm_id} has zero capacity")
        seen = set()
        for j in jobs:
            if j.job_id in seen or j.job_id in self.jobs:
                raise InvalidWorkload(f"Duplicate job_id: {j.job_id}")
            seen.add(j.job_id)
            if j.status is not JobStatus.CREATED:
                raise InvalidWorkload(
                    f"Job {j.job_id} is {j.status.value}; only CREATED jobs can be submitted"
                )
            if j.length <= 0:
                raise InvalidWorkload(f"Job {j.job_id} has non-positive length {j.length}")
            if j.pes_required < 1:
                raise InvalidWorkload(f"Job {j.job_id} must require at least one PE")
            if j.arrival_time < 0:
                raise InvalidWorkload(f"Job {j.job_id} arrives before time 0")

    def submit(self, jobs: List[Job], cluster) -> None:
        """Bind ``jobs`` (already in policy order) to VMs round-robin and queue their arrivals."""
        vms = sorted(cluster.vms, key=lambda vm: vm.vm_id)
        self._validate(jobs, vms)

        for vm in vms:
            self._vms[vm.vm_id] = vm

        for k, j in enumerate(jobs):
            vm = vms[k % len(vms)]
            self.jobs[j.job_id] = j
            j.mark_queued(vm.vm_id)
            self.schedule_event(j.arrival_time, "ARRIVE", job_id=j.job_id, vm_id=vm.vm_id)

    def run(
        self,
        jobs: List[Job],
        cluster,
        end_time: Optional[float] = None,
    ) -> Dict[int, Job]:
        """
        Run the simulation until the event queue is empty or until end_time.
        """
        self.submit(jobs, cluster)

        while self._pq:
            ev = heapq.heappop(self._pq)

            if end_time is not None and ev.time > end_time:
                break

            vm = self._vms[ev.vm_id]

            if ev.kind == "ARRIVE":
                self.time = ev.time
                job = self.jobs[ev.job_id]
                vm.scheduler.admit(job, now=self.time)
                job.mark_running(self.time)
                logger.debug(f"t={self.time:.4f} job {job.job_id} admitted to vm {vm.vm_id}")

            elif ev.kind == "FINISH":
                if ev.version != vm.scheduler.version:
                    continue  # superseded by a later arrival or departure
                self.time = ev.time
                for job in vm.scheduler.collect_finished(now=self.time, expected=ev.job_id):
                    job.mark_finished(self.time)
                    logger.debug(f"t={self.time:.4f} job {job.job_id} finished on vm {vm.vm_id}")

            else:
                raise ValueError(f"Unknown event kind: {ev.kind}")

            self._predict(vm)

        return self.jobs

    def _predict(self, vm) -> None:
        """Schedule the next completion on ``vm`` under its current sharing."""
        nxt = vm.scheduler.next_completion()
        if nxt is None:
            return
        when, job = nxt
        self.schedule_event(when, "FINISH", job_id=job.job_id, vm_id=vm.vm_id,
                            version=vm.scheduler.version)

    def is_quiescent(self) -> bool:
        return all(j.status is JobStatus.FINISHED for j in self.jobs.values())

    def drain(self) -> List[CompletionRecord]:
        """Completion records for every submitted job, in job-id order."""
        if not self.is_quiescent():
            pending = sum(1 for j in self.jobs.values() if j.status is not JobStatus.FINISHED)
            raise RuntimeError(f"Cannot drain: {pending} job(s) still queued or running")
        return [CompletionRecord.from_job(self.jobs[jid]) for jid in sorted(self.jobs)]

    def capacity_trace(self) -> Dict[int, List[Tuple[float, float, float]]]:
        """Per-VM ``(t0, t1, instructions_done)`` intervals recorded during the run."""
        return {vm_id: list(vm.scheduler.trace) for vm_id, vm in self._vms.items()}
