#!/usr/bin/env python3
"""
Stress scenario runner.

Runs one scenario against an already provisioned SolrCloud + HDFS cluster
described by STRESS_* environment variables.

Run as script:
    python -m hdfs_stress.runner --seed 42 --cycles 2 --chaos

Exit codes:
    0: Scenario passed
    1: Scenario failed
"""

import argparse
import asyncio
import sys

from hdfs_stress.config import Settings, get_settings
from hdfs_stress.logging import get_in_memory_logs, get_logger, setup_logging
from hdfs_stress.scenario.context import build_context
from hdfs_stress.scenario.orchestrator import ScenarioOrchestrator

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collection lifecycle stress test for SolrCloud on HDFS"
    )
    parser.add_argument("--seed", type=int, help="Random seed (default: STRESS_SEED or random)")
    parser.add_argument("--cycles", type=int, help="Number of create/index/delete cycles")
    parser.add_argument("--shards", type=int, dest="shard_count", help="Base shard count")
    parser.add_argument("--nightly", action="store_true", default=None, help="Nightly base shard count")
    chaos = parser.add_mutually_exclusive_group()
    chaos.add_argument("--chaos", dest="chaos", action="store_true", default=None,
                       help="Always finish with the safe mode chaos cycle")
    chaos.add_argument("--no-chaos", dest="chaos", action="store_false",
                       help="Never run the chaos cycle")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--json-logs", action="store_true", default=None, help="JSON log lines")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Settings with command line values layered over the environment."""
    overrides: dict[str, object] = {}
    for name in ("seed", "cycles", "shard_count", "nightly", "log_level"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.json_logs is not None:
        overrides["log_json"] = args.json_logs
    if args.chaos is not None:
        overrides["chaos_probability"] = 1.0 if args.chaos else 0.0
    if not overrides:
        return settings
    return Settings(**{**settings.model_dump(), **overrides})


async def run_scenario(settings: Settings) -> int:
    """Build the cluster context, run one scenario, close the context."""
    context = build_context(settings, logger)
    try:
        orchestrator = ScenarioOrchestrator(context)
        await orchestrator.run()
        return 0
    except Exception:
        logger.exception("Scenario failed")
        for entry in get_in_memory_logs(level="WARNING", limit=20):
            sys.stderr.write(f"{entry['timestamp']} {entry['level']} {entry['message']}\n")
        return 1
    finally:
        await context.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    logger.info("Configuration: %s", settings.get_redacted_config())
    return asyncio.run(run_scenario(settings))


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
