"""faas_sim - Multi-Tenant FaaS Cluster Discrete-Event Simulator v0.1.0"""
from __future__ import annotations

__version__ = "0.1.0"

from loguru import logger

# Silent as a library; the experiment runner calls logger.enable("faas_sim")
logger.disable("faas_sim")

__all__ = [
    "__version__",
    "SimEngine", "Job", "JobStatus", "Event", "CompletionRecord", "RECORD_COLUMNS",
    "TimeSharedScheduler",
    "Host", "VirtualMachine", "Cluster", "build_cluster",
    "SchedulingPolicy", "RoundRobinPolicy", "ShortestJobFirstPolicy", "TenantAwarePolicy",
    "POLICY_NAMES", "get_policy",
    "RunResult", "run_policy", "run_all",
    "MetricsAggregator", "TenantStats",
    "WorkloadConfig", "generate_jobs", "generate_synthetic",
    "ExperimentConfig",
    "SimulationError", "CapacityExceeded", "InvalidWorkload", "UnknownPolicy",
]

from faas_sim.errors import SimulationError, CapacityExceeded, InvalidWorkload, UnknownPolicy
from faas_sim.sim.engine import SimEngine, Job, JobStatus, Event, CompletionRecord, RECORD_COLUMNS
from faas_sim.sim.time_shared import TimeSharedScheduler
from faas_sim.cluster.cluster import Host, VirtualMachine, Cluster, build_cluster
from faas_sim.scheduler.base import SchedulingPolicy
from faas_sim.scheduler.round_robin import RoundRobinPolicy
from faas_sim.scheduler.sjf import ShortestJobFirstPolicy
from faas_sim.scheduler.tenant_aware import TenantAwarePolicy
from faas_sim.scheduler.registry import POLICY_NAMES, get_policy
from faas_sim.sim.runner import RunResult, run_policy, run_all
from faas_sim.metrics.collector import MetricsAggregator, TenantStats
from faas_sim.workloads.synthetic import WorkloadConfig, generate_jobs, generate_synthetic
from faas_sim.config import ExperimentConfig
