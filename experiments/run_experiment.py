"""
Multi-Tenant FaaS Simulator: Experiment Runner
=============================================
Runs every scheduling policy against one seeded multi-tenant workload,
writes a CSV of completion records per policy and a plain-text comparison
report, and prints a summary table.

Usage
-----
    python experiments/run_experiment.py
    python experiments/run_experiment.py --seed 7 --vm_count 4 --policies SJF TenantAware
    python experiments/run_experiment.py --config experiments/config_default.yaml
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict

import pandas as pd
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from faas_sim import __version__
from faas_sim.config import ExperimentConfig
from faas_sim.metrics.collector import MetricsAggregator
from faas_sim.scheduler.registry import POLICY_NAMES
from faas_sim.sim.engine import RECORD_COLUMNS
from faas_sim.sim.runner import RunResult, run_all
from faas_sim.workloads.synthetic import generate_synthetic

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fmt(val: Any, decimals: int = 2) -> str:
    if val is None:
        return "-"
    if isinstance(val, float):
        return f"{val:.{decimals}f}"
    return str(val)


def write_policy_csv(result: RunResult, outdir: str) -> str:
    path = os.path.join(outdir, f"multitenant_{result.policy}.csv")
    df = pd.DataFrame([r.as_row() for r in result.records], columns=list(RECORD_COLUMNS))
    df.to_csv(path, index=False)
    logger.info(f"Generated CSV file: {path}")
    return path


def build_report(cfg: ExperimentConfig, mc: MetricsAggregator) -> str:
    lines = [
        "Multi-Tenant FaaS Simulation Comparison Report",
        "============================================",
        "",
        "Simulation Parameters:",
        f"  Tenants: {cfg.tenant_count}",
        f"  Cloudlets: {cfg.job_count}",
        f"  VMs: {cfg.vm_count}",
        f"  Hosts: {cfg.host_count}",
        "",
        "Overall Performance Summary:",
        "---------------------------",
    ]
    ranked = mc.rank_policies()
    for policy, total in ranked:
        lines.append(f"  {policy}: Total Execution Time = {total:.2f}")
    if ranked:
        lines.append("")
        lines.append(f"Best Overall Algorithm: {mc.best_policy()}")
    lines += ["", "Per-Tenant Analysis:", "------------------"]

    for tenant in range(cfg.tenant_count):
        lines.append(f"Tenant {tenant}:")
        for policy in mc.policies:
            stats = mc.tenant_summary(policy).get(tenant)
            if stats is None:
                continue
            lines += [
                f"  {policy}:",
                f"    Avg Execution Time: {stats.avg_exec:.2f}",
                f"    Avg Wait Time: {stats.avg_wait:.2f}",
                f"    Total Execution Time: {stats.total_exec:.2f}",
            ]
        lines.append(f"  Best Algorithm for Tenant {tenant}: {mc.best_policy_for_tenant(tenant)}")
        lines.append("")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Rich output
# ---------------------------------------------------------------------------

def print_banner() -> None:
    console.print(
        Panel.fit(
            f"[bold cyan]FaaS Simulator[/bold cyan]  [dim]v{__version__}[/dim]\n"
            "[dim]Multi-Tenant Serverless Discrete-Event Simulator[/dim]",
            border_style="cyan",
            padding=(0, 2),
        )
    )


def print_summary_table(mc: MetricsAggregator, results: Dict[str, RunResult]) -> None:
    table = Table(
        title="[bold]Results Summary[/bold]",
        box=box.ROUNDED,
        highlight=True,
        show_lines=True,
    )
    table.add_column("Policy",          style="bold cyan", no_wrap=True)
    table.add_column("Jobs",            style="green",  justify="right")
    table.add_column("Total Exec",      style="yellow", justify="right")
    table.add_column("Makespan",        style="yellow", justify="right")
    table.add_column("Jain Fairness",   style="blue",   justify="right")

    for policy, total in mc.rank_policies():
        table.add_row(
            policy,
            _fmt(len(mc.records(policy))),
            _fmt(total),
            _fmt(results[policy].sim_end_time),
            _fmt(mc.jain_fairness(policy), 4),
        )
    for policy, res in results.items():
        if not res.ok:
            table.add_row(policy, "-", f"[red]failed: {res.error}[/red]", "-", "-")
    console.print(table)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    ap = argparse.ArgumentParser(
        description="FaaS Simulator: multi-tenant scheduling policy comparison"
    )
    defaults = ExperimentConfig()
    ap.add_argument("--outdir",       default=defaults.outdir)
    ap.add_argument("--tenant_count", type=int,   default=defaults.tenant_count)
    ap.add_argument("--job_count",    type=int,   default=defaults.job_count)
    ap.add_argument("--length_min",   type=int,   default=defaults.length_min)
    ap.add_argument("--length_max",   type=int,   default=defaults.length_max)
    ap.add_argument("--seed",         type=int,   default=defaults.seed)
    ap.add_argument("--host_count",   type=int,   default=defaults.host_count)
    ap.add_argument("--pes_per_host", type=int,   default=defaults.pes_per_host)
    ap.add_argument("--host_mips",    type=float, default=defaults.host_mips)
    ap.add_argument("--vm_count",     type=int,   default=defaults.vm_count)
    ap.add_argument("--vm_mips",      type=float, default=defaults.vm_mips)
    ap.add_argument("--policies", nargs="+", default=list(POLICY_NAMES))
    ap.add_argument("--parallel", action="store_true",
                    help="Run policies in worker threads")
    ap.add_argument("--verbose", "-v", action="store_true",
                    help="Log every simulation event")
    ap.add_argument("--config", default=None,
                    help="Path to YAML experiment config (overrides CLI flags)")
    args = ap.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")
    logger.enable("faas_sim")

    if args.config:
        cfg = ExperimentConfig.from_yaml(args.config)
    else:
        cfg = ExperimentConfig(
            tenant_count=args.tenant_count,
            job_count=args.job_count,
            length_min=args.length_min,
            length_max=args.length_max,
            seed=args.seed,
            host_count=args.host_count,
            pes_per_host=args.pes_per_host,
            host_mips=args.host_mips,
            vm_count=args.vm_count,
            vm_mips=args.vm_mips,
            policies=args.policies,
            parallel=args.parallel,
            outdir=args.outdir,
        )

    os.makedirs(cfg.outdir, exist_ok=True)
    print_banner()
    console.print(
        f"\n[dim]Cluster:[/dim] [bold]{cfg.host_count}[/bold] hosts / "
        f"[bold]{cfg.vm_count}[/bold] VMs  "
        f"[dim]Jobs:[/dim] [bold]{cfg.job_count}[/bold] over "
        f"[bold]{cfg.tenant_count}[/bold] tenants  "
        f"[dim]Seed:[/dim] [bold]{cfg.seed}[/bold]\n"
    )

    jobs = generate_synthetic(cfg.workload_config())
    results = run_all(cfg.policies, jobs, cfg.cluster_kwargs(), parallel=cfg.parallel)

    mc = MetricsAggregator()
    for policy, res in results.items():
        if not res.ok:
            logger.error(f"Error running simulation with {policy}: {res.error}")
            continue
        write_policy_csv(res, cfg.outdir)
        mc.add_run(policy, res.records)

    report_path = os.path.join(cfg.outdir, "comparison_report.txt")
    with open(report_path, "w") as f:
        f.write(build_report(cfg, mc))
    logger.info(f"Generated comparison report: {report_path}")

    print_summary_table(mc, results)
    console.print(
        f"\n[bold green]Done![/bold green] "
        f"Results in [cyan]{cfg.outdir}/[/cyan]"
    )


if __name__ == "__main__":
    main()
