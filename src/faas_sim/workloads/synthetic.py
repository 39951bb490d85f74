from __future__ import annotations

from dataclasses import dataclass
from typing import List
import numpy as np

from faas_sim.sim.engine import Job


@dataclass
class WorkloadConfig:
    job_count: int = 20
    tenant_count: int = 4
    length_min: int = 40000  # instructions, inclusive
    length_max: int = 50000  # instructions, inclusive
    file_size: int = 300
    output_size: int = 300
    seed: int = 42


def generate_jobs(
    count: int,
    tenant_count: int,
    length_min: int,
    length_max: int,
    seed: int,
    file_size: int = 300,
    output_size: int = 300,
) -> List[Job]:
    """
    Draw ``count`` single-PE jobs, all submitted at time 0.

    Lengths are uniform on ``[length_min, length_max]`` and tenants uniform on
    ``[0, tenant_count)``.  The same seed always yields the same list, which is
    what lets every policy be compared on an identical workload.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    if tenant_count < 1:
        raise ValueError("tenant_count must be >= 1")
    if length_min < 1:
        raise ValueError("length_min must be >= 1")
    if length_max < length_min:
        raise ValueError("length_max must be >= length_min")

    rng = np.random.default_rng(seed)
    lengths = rng.integers(length_min, length_max, size=count, endpoint=True)
    tenants = rng.integers(0, tenant_count, size=count)

    return [
        Job(
            job_id=i,
            length=int(lengths[i]),
            tenant_id=int(tenants[i]),
            file_size=file_size,
            output_size=output_size,
        )
        for i in range(count)
    ]


def generate_synthetic(cfg: WorkloadConfig) -> List[Job]:
    return generate_jobs(
        count=cfg.job_count,
        tenant_count=cfg.tenant_count,
        length_min=cfg.length_min,
        length_max=cfg.length_max,
        seed=cfg.seed,
        file_size=cfg.file_size,
        output_size=cfg.output_size,
    )
