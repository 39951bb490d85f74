"""
YAML-based experiment configuration loader.

Example config_default.yaml
----------------------------
tenant_count: 4
job_count: 20
length_min: 40000
length_max: 50000
seed: 42
host_count: 3
pes_per_host: 2
host_mips: 1000
vm_count: 5
vm_mips: 1000
policies:
  - RoundRobin
  - SJF
  - TenantAware
parallel: false
outdir: output
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

import yaml

from faas_sim.workloads.synthetic import WorkloadConfig


@dataclass
class ExperimentConfig:
    """Configuration for one comparison across policies."""

    # workload
    tenant_count: int = 4
    job_count: int = 20
    length_min: int = 40000
    length_max: int = 50000
    seed: int = 42

    # cluster
    host_count: int = 3
    pes_per_host: int = 2
    host_mips: float = 1000
    vm_count: int = 5
    vm_mips: float = 1000
    vm_pes: int = 1

    policies: List[str] = field(
        default_factory=lambda: ["RoundRobin", "SJF", "TenantAware"]
    )
    parallel: bool = False
    outdir: str = "output"

    @classmethod
    def from_yaml(cls, path: str) -> "ExperimentConfig":
        """Load an ExperimentConfig from a YAML file; unknown keys are ignored."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def workload_config(self) -> WorkloadConfig:
        return WorkloadConfig(
            job_count=self.job_count,
            tenant_count=self.tenant_count,
            length_min=self.length_min,
            length_max=self.length_max,
            seed=self.seed,
        )

    def cluster_kwargs(self) -> Dict[str, Any]:
        return {
            "host_count": self.host_count,
            "pes_per_host": self.pes_per_host,
            "vm_count": self.vm_count,
            "host_mips": self.host_mips,
            "vm_mips": self.vm_mips,
            "vm_pes": self.vm_pes,
        }
