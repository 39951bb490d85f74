"""Tests for host/VM construction and placement."""
from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from faas_sim.cluster.cluster import Host, VirtualMachine, build_cluster
from faas_sim.errors import CapacityExceeded, InvalidWorkload


def test_build_counts():
    hosts, vms = build_cluster(host_count=3, pes_per_host=2, vm_count=5,
                               host_mips=1000, vm_mips=1000)
    assert len(hosts) == 3
    assert len(vms) == 5
    assert [vm.vm_id for vm in vms] == [0, 1, 2, 3, 4]


def test_every_vm_placed_on_a_host():
    cluster = build_cluster(host_count=3, pes_per_host=2, vm_count=5,
                            host_mips=1000, vm_mips=1000)
    host_ids = {h.host_id for h in cluster.hosts}
    assert all(vm.host_id in host_ids for vm in cluster.vms)
    placed = sorted(v for ids in cluster.placement.values() for v in ids)
    assert placed == [0, 1, 2, 3, 4]


def test_placement_spreads_before_stacking():
    cluster = build_cluster(host_count=3, pes_per_host=2, vm_count=5,
                            host_mips=1000, vm_mips=1000)
    assert [vm.host_id for vm in cluster.vms] == [0, 1, 2, 0, 1]
    assert [vm.vm_id for vm in cluster.host_vms(2)] == [2]


def test_placement_never_oversubscribes_host():
    cluster = build_cluster(host_count=4, pes_per_host=4, vm_count=7,
                            host_mips=500, vm_mips=400, vm_pes=2)
    for host in cluster.hosts:
        demand = sum(vm.total_mips for vm in cluster.host_vms(host.host_id))
        assert demand <= host.total_mips


def test_build_is_deterministic():
    a = build_cluster(host_count=3, pes_per_host=2, vm_count=5, host_mips=1000, vm_mips=1000)
    b = build_cluster(host_count=3, pes_per_host=2, vm_count=5, host_mips=1000, vm_mips=1000)
    assert a.placement == b.placement


def test_aggregate_demand_over_capacity_raises():
    """5 x 1000 MIPS VMs cannot fit on 3 single-PE 1000 MIPS hosts."""
    with pytest.raises(CapacityExceeded):
        build_cluster(host_count=3, pes_per_host=1, vm_count=5, host_mips=1000, vm_mips=1000)


def test_fragmented_capacity_raises():
    """Enough MIPS in aggregate, but no single host can take a 2-PE VM."""
    with pytest.raises(CapacityExceeded, match="No host has room"):
        build_cluster(host_count=4, pes_per_host=1, vm_count=1,
                      host_mips=1000, vm_mips=1000, vm_pes=2)


def test_vm_faster_than_host_pe_raises():
    with pytest.raises(CapacityExceeded):
        build_cluster(host_count=2, pes_per_host=4, vm_count=1, host_mips=500, vm_mips=1000)


def test_ram_limit_enforced():
    with pytest.raises(CapacityExceeded):
        build_cluster(host_count=1, pes_per_host=8, vm_count=5, host_mips=1000,
                      vm_mips=1000, host_ram=2048, vm_ram=512)


def test_zero_vms_allowed():
    cluster = build_cluster(host_count=1, pes_per_host=1, vm_count=0, host_mips=1000, vm_mips=1000)
    assert cluster.vms == []
    assert cluster.total_mips() == 0


@pytest.mark.parametrize("kwargs", [
    dict(host_count=0),
    dict(pes_per_host=0),
    dict(vm_count=-1),
    dict(host_mips=0),
    dict(vm_mips=0),
    dict(vm_pes=0),
])
def test_invalid_arguments_raise(kwargs):
    args = dict(host_count=1, pes_per_host=1, vm_count=1, host_mips=1000, vm_mips=1000)
    args.update(kwargs)
    with pytest.raises(InvalidWorkload):
        build_cluster(**args)


def test_invalid_arguments_still_value_errors():
    with pytest.raises(ValueError):
        build_cluster(host_count=1, pes_per_host=1, vm_count=1, host_mips=0, vm_mips=1000)


def test_host_is_immutable():
    h = Host(host_id=0, pes=2, mips=1000)
    with pytest.raises(FrozenInstanceError):
        h.pes = 4


def test_vm_owns_time_shared_scheduler():
    vm = VirtualMachine(vm_id=3, mips=1000, pes=2)
    assert vm.scheduler.vm is vm
    assert vm.scheduler.capacity == pytest.approx(2000.0)


def test_cluster_vm_lookup():
    cluster = build_cluster(host_count=1, pes_per_host=2, vm_count=2, host_mips=1000, vm_mips=1000)
    assert cluster.vm(1).vm_id == 1
    with pytest.raises(KeyError):
        cluster.vm(9)
