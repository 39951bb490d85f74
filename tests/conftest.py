"""Shared pytest fixtures for FaaS simulator tests."""
from __future__ import annotations

import pytest

from faas_sim.cluster.cluster import Cluster, build_cluster
from faas_sim.sim.engine import Job


def make_job(
    job_id: int,
    length: int = 1000,
    tenant: int = 0,
    arrival: float = 0.0,
    pes: int = 1,
) -> Job:
    """Factory helper for the fixtures below."""
    return Job(
        job_id=job_id,
        length=length,
        tenant_id=tenant,
        arrival_time=arrival,
        pes_required=pes,
    )


@pytest.fixture
def single_vm_cluster() -> Cluster:
    return build_cluster(host_count=1, pes_per_host=1, vm_count=1, host_mips=1000, vm_mips=1000)


@pytest.fixture
def scenario_cluster() -> Cluster:
    """3 hosts x 2 PEs x 1000 MIPS hosting 5 x 1000 MIPS VMs."""
    return build_cluster(host_count=3, pes_per_host=2, vm_count=5, host_mips=1000, vm_mips=1000)


@pytest.fixture
def simple_jobs() -> list[Job]:
    """Five jobs over three tenants with known lengths."""
    return [
        make_job(0, length=3000, tenant=0),
        make_job(1, length=1000, tenant=1),
        make_job(2, length=2000, tenant=0),
        make_job(3, length=1000, tenant=2),
        make_job(4, length=5000, tenant=0),
    ]
