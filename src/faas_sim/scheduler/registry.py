from __future__ import annotations

from typing import Dict, Type

from faas_sim.errors import UnknownPolicy
from faas_sim.scheduler.base import SchedulingPolicy
from faas_sim.scheduler.round_robin import RoundRobinPolicy
from faas_sim.scheduler.sjf import ShortestJobFirstPolicy
from faas_sim.scheduler.tenant_aware import TenantAwarePolicy

POLICY_MAP: Dict[str, Type[SchedulingPolicy]] = {
    "RoundRobin":  RoundRobinPolicy,
    "SJF":         ShortestJobFirstPolicy,
    "TenantAware": TenantAwarePolicy,
}

POLICY_NAMES = tuple(POLICY_MAP)

# Alternate spellings accepted on the command line and in configs
_ALIASES = {
    "rr": "RoundRobin",
    "roundrobin": "RoundRobin",
    "sjf": "SJF",
    "shortestjobfirst": "SJF",
    "tenant": "TenantAware",
    "tenantaware": "TenantAware",
}


def canonical_name(name: str) -> str:
    if name in POLICY_MAP:
        return name
    key = name.replace("_", "").replace("-", "").lower()
    if key in _ALIASES:
        return _ALIASES[key]
    raise UnknownPolicy(
        f"Unknown policy '{name}'. Valid options: {list(POLICY_NAMES)}"
    )


def get_policy(name: str) -> SchedulingPolicy:
    """Return a fresh policy instance for ``name``."""
    return POLICY_MAP[canonical_name(name)]()
