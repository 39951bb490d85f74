from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from faas_sim.sim.engine import RECORD_COLUMNS, CompletionRecord


def raw_wait_time(record: CompletionRecord) -> float:
    """finish - start - exec; zero up to floating rounding, which may make it slightly negative."""
    return record.finish_time - record.start_time - record.exec_time


def wait_time(record: CompletionRecord) -> float:
    return max(0.0, raw_wait_time(record))


@dataclass
class TenantStats:
    jobs: int = 0
    total_exec: float = 0.0
    total_wait: float = 0.0      # clamped at 0 per job
    total_raw_wait: float = 0.0  # unclamped, for inspection

    @property
    def avg_exec(self) -> float:
        return self.total_exec / self.jobs if self.jobs else 0.0

    @property
    def avg_wait(self) -> float:
        return self.total_wait / self.jobs if self.jobs else 0.0


class MetricsAggregator:
    """
    Per-policy, per-tenant summaries over completion records.

    Ties between policies (equal total execution time) always go to the
    lexically smallest policy name, so rankings do not depend on run order.
    """

    def __init__(self):
        self._runs: Dict[str, List[CompletionRecord]] = {}

    def add_run(self, policy: str, records: Iterable[CompletionRecord]) -> None:
        if policy in self._runs:
            raise ValueError(f"Duplicate policy run: {policy}")
        self._runs[policy] = list(records)

    @property
    def policies(self) -> List[str]:
        return list(self._runs)

    def records(self, policy: str) -> List[CompletionRecord]:
        return list(self._runs[policy])

    def tenants(self) -> List[int]:
        return sorted({r.tenant_id for recs in self._runs.values() for r in recs})

    def tenant_summary(self, policy: str) -> Dict[int, TenantStats]:
        stats: Dict[int, TenantStats] = {}
        for r in self._runs[policy]:
            s = stats.setdefault(r.tenant_id, TenantStats())
            s.jobs += 1
            s.total_exec += r.exec_time
            s.total_wait += wait_time(r)
            s.total_raw_wait += raw_wait_time(r)
        return dict(sorted(stats.items()))

    def total_exec_time(self, policy: str) -> float:
        return sum(r.exec_time for r in self._runs[policy])

    def rank_policies(self) -> List[Tuple[str, float]]:
        """``(policy, total exec time)`` pairs, best first."""
        totals = [(p, self.total_exec_time(p)) for p in self._runs]
        return sorted(totals, key=lambda pt: (pt[1], pt[0]))

    def best_policy(self) -> Optional[str]:
        ranked = self.rank_policies()
        return ranked[0][0] if ranked else None

    def best_policy_for_tenant(self, tenant_id: int) -> Optional[str]:
        best: Optional[Tuple[float, str]] = None
        for policy in self._runs:
            s = self.tenant_summary(policy).get(tenant_id)
            if s is None:
                continue
            key = (s.total_exec, policy)
            if best is None or key < best:
                best = key
        return best[1] if best else None

    def jain_fairness(self, policy: str) -> Optional[float]:
        """
        Jain's fairness index over per-tenant total execution time.
        1.0 = perfectly even, 1/n = one tenant takes everything.
        """
        vals = [s.total_exec for s in self.tenant_summary(policy).values()]
        if not vals:
            return None
        s = sum(vals)
        sq = sum(v * v for v in vals)
        if sq == 0:
            return 1.0
        return (s * s) / (len(vals) * sq)

    def to_frame(self) -> pd.DataFrame:
        """All records as report rows (2 dp times) plus ``policy`` and ``Length`` columns."""
        rows = []
        for policy, recs in self._runs.items():
            for r in recs:
                row = dict(zip(RECORD_COLUMNS, r.as_row()))
                row["Length"] = r.length
                row["policy"] = policy
                rows.append(row)
        return pd.DataFrame(rows, columns=[*RECORD_COLUMNS, "Length", "policy"])
