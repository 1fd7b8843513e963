"""Command line driver for queues declared in a configuration file."""

import argparse
import asyncio
import logging
from pathlib import Path

from qemistry.config import build_registry, load_config
from qemistry.config_schema import QemistryConfig
from qemistry.scheduling import AsyncioScheduler
from qemistry.sinks import CommandSink, LoggingCommandSink, StateCommandSink
from qemistry.state import DictStateResolver

logger = logging.getLogger(__name__)

# How often to look for outstanding consumption checks while draining
POLL_INTERVAL = 0.05


async def drive(
    config: QemistryConfig,
    sink: CommandSink,
    queue_name: str | None = None,
    timeout: float = 5.0,
) -> dict[str, int]:
    """Run the configured queues until no consumption checks remain.

    Args:
        config: Loaded configuration.
        sink: Destination for command strings.
        queue_name: Only drive this queue (all queues if None).
        timeout: Give up waiting for checks after this many seconds.

    Returns:
        Remaining action count per queue.
    """
    loop = asyncio.get_running_loop()
    registry = build_registry(config, sink, scheduler=AsyncioScheduler(loop))

    registry.do(queue_name)

    deadline = loop.time() + timeout
    while registry.pending_checks and loop.time() < deadline:
        await asyncio.sleep(POLL_INTERVAL)

    if registry.pending_checks:
        logger.warning(
            f"Timed out after {timeout}s with {registry.pending_checks} consumption check(s) pending"
        )
        for queue in registry.queues.values():
            queue.cancel_pending_checks()

    return {name: queue.action_count for name, queue in registry.queues.items()}


def describe(config: QemistryConfig) -> list[str]:
    """One summary line per configured queue."""
    lines = []
    for queue in config.queues:
        options = ", ".join(queue.options) or "none"
        lines.append(
            f"{queue.name}: {len(queue.actions)} action(s), "
            f"conditions={queue.conditions!r}, options={options}"
        )
    return lines


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Qemistry - condition-gated action queues",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to configuration file (default: ./qemistry.yaml)",
    )
    parser.add_argument(
        "--queue",
        "-q",
        type=str,
        help="Only drive this queue (default: all queues)",
    )
    parser.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=5.0,
        help="Seconds to wait for pending consumption checks (default: 5)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the configuration and list queues without running them",
    )
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> None:
    """Entry point for the ``qemistry`` command."""
    args = parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(
        level=config.settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.check:
        for line in describe(config):
            print(line)
        return

    # Shares config.state with the registry, so "set" commands flip live flags
    sink = StateCommandSink(DictStateResolver(config.state), LoggingCommandSink())
    remaining = asyncio.run(drive(config, sink, args.queue, args.timeout))
    for name, count in remaining.items():
        print(f"{name}: {count} action(s) remaining")


if __name__ == "__main__":
    run()
