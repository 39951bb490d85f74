from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from loguru import logger

from faas_sim.errors import CapacityExceeded, InvalidWorkload
from faas_sim.sim.time_shared import TimeSharedScheduler


@dataclass(frozen=True)
class Host:
    host_id: int
    pes: int
    mips: float  # per PE
    ram: int = 2048
    bw: int = 10000
    storage: int = 1_000_000

    def __post_init__(self):
        if self.pes <= 0:
            raise InvalidWorkload("Host pes must be > 0")
        if self.mips <= 0:
            raise InvalidWorkload("Host mips must be > 0")

    @property
    def total_mips(self) -> float:
        return self.pes * self.mips


@dataclass
class VirtualMachine:
    vm_id: int
    mips: float  # per PE
    pes: int = 1
    ram: int = 512
    bw: int = 1000
    size: int = 10000
    host_id: Optional[int] = None  # set by placement
    scheduler: TimeSharedScheduler = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.mips < 0 or self.pes < 0:
            raise InvalidWorkload("VM mips and pes must be >= 0")
        self.scheduler = TimeSharedScheduler(self)

    @property
    def total_mips(self) -> float:
        return self.pes * self.mips


@dataclass
class _Headroom:
    mips: float
    ram: int
    bw: int
    storage: int

    def fits(self, host: Host, vm: VirtualMachine) -> bool:
        return (
            vm.pes <= host.pes
            and vm.mips <= host.mips
            and vm.total_mips <= self.mips
            and vm.ram <= self.ram
            and vm.bw <= self.bw
            and vm.size <= self.storage
        )

    def take(self, vm: VirtualMachine) -> None:
        self.mips -= vm.total_mips
        self.ram -= vm.ram
        self.bw -= vm.bw
        self.storage -= vm.size


@dataclass
class Cluster:
    """Hosts plus the VMs placed on them; unpacks as ``hosts, vms``."""

    hosts: List[Host]
    vms: List[VirtualMachine]
    placement: Dict[int, List[int]] = field(default_factory=dict)  # host_id -> vm_ids

    def __iter__(self) -> Iterator:
        return iter((self.hosts, self.vms))

    def vm(self, vm_id: int) -> VirtualMachine:
        for vm in self.vms:
            if vm.vm_id == vm_id:
                return vm
        raise KeyError(f"No VM with id {vm_id}")

    def host_vms(self, host_id: int) -> List[VirtualMachine]:
        return [self.vm(vm_id) for vm_id in self.placement.get(host_id, [])]

    def total_mips(self) -> float:
        """Aggregate VM capacity available to jobs."""
        return sum(vm.total_mips for vm in self.vms)


def build_cluster(
    host_count: int,
    pes_per_host: int,
    vm_count: int,
    host_mips: float,
    vm_mips: float,
    vm_pes: int = 1,
    host_ram: int = 2048,
    host_bw: int = 10000,
    host_storage: int = 1_000_000,
    vm_ram: int = 512,
    vm_bw: int = 1000,
    vm_size: int = 10000,
) -> Cluster:
    """
    Build ``host_count`` identical hosts and place ``vm_count`` identical VMs.

    Each VM goes to the host with the most MIPS headroom left that can also
    hold its PEs, RAM, bandwidth and image (ties go to the lower host id), so
    VMs spread across hosts before any host takes a second one.  Raises
    ``CapacityExceeded`` when the VMs ask for more than the hosts provide and
    ``InvalidWorkload`` when a host or VM would have no capacity at all.
    """
    if host_count <= 0:
        raise InvalidWorkload("host_count must be > 0")
    if vm_count < 0:
        raise InvalidWorkload("vm_count must be >= 0")
    if vm_pes <= 0:
        raise InvalidWorkload("vm_pes must be > 0")
    if vm_mips <= 0:
        raise InvalidWorkload("vm_mips must be > 0")

    hosts = [
        Host(host_id=i, pes=pes_per_host, mips=host_mips,
             ram=host_ram, bw=host_bw, storage=host_storage)
        for i in range(host_count)
    ]

    demand = vm_count * vm_mips * vm_pes
    supply = sum(h.total_mips for h in hosts)
    if demand > supply:
        raise CapacityExceeded(
            f"{vm_count} VMs need {demand:g} MIPS but {host_count} hosts provide {supply:g}"
        )

    headroom = {h.host_id: _Headroom(h.total_mips, h.ram, h.bw, h.storage) for h in hosts}
    placement: Dict[int, List[int]] = {h.host_id: [] for h in hosts}
    vms: List[VirtualMachine] = []

    for i in range(vm_count):
        vm = VirtualMachine(vm_id=i, mips=vm_mips, pes=vm_pes,
                            ram=vm_ram, bw=vm_bw, size=vm_size)
        candidates = [h for h in hosts if headroom[h.host_id].fits(h, vm)]
        if not candidates:
            raise CapacityExceeded(f"No host has room for vm {i}")
        host = max(candidates, key=lambda h: (headroom[h.host_id].mips, -h.host_id))
        headroom[host.host_id].take(vm)
        vm.host_id = host.host_id
        placement[host.host_id].append(vm.vm_id)
        vms.append(vm)

    logger.debug(f"Placed {vm_count} VMs on {host_count} hosts: {placement}")
    return Cluster(hosts=hosts, vms=vms, placement=placement)
