"""Loading queue files and turning them into a live registry."""

import logging
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from qemistry.config_schema import ActionConfig, GlobalSettings, QemistryConfig
from qemistry.queues import QueueRegistry
from qemistry.scheduling import DeferredScheduler
from qemistry.sinks import CommandSink
from qemistry.state import DictStateResolver

logger = logging.getLogger(__name__)

# Searched in the working directory when no path is given
CONFIG_FILENAMES = ("qemistry.yaml", "qemistry.yml")


class EnvSettings(BaseSettings):
    """Settings loaded from QEMISTRY_* environment variables or .env file.

    Used when no YAML config is found.
    """

    model_config = SettingsConfigDict(
        env_prefix="QEMISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    verify_delay: float = Field(default=0.5, gt=0, description="Consumption check delay in seconds")
    cancel_pending_checks: bool = Field(default=True, description="Cancel armed checks on reset/delete")
    log_level: str = Field(default="INFO", description="Logging level")


def read_queue_file(path: Path) -> QemistryConfig:
    """Parse a queue file; an empty file yields the default config.

    Raises:
        ValidationError: If a queue, action or setting is malformed.
        yaml.YAMLError: If the file is not valid YAML.
    """
    logger.info(f"Reading queues from {path}")
    document = yaml.safe_load(path.read_text()) or {}
    return QemistryConfig.model_validate(document)


def config_from_env() -> QemistryConfig:
    """Settings from QEMISTRY_* variables, with no queues declared."""
    env = EnvSettings()
    return QemistryConfig(
        settings=GlobalSettings(
            verify_delay=env.verify_delay,
            cancel_pending_checks=env.cancel_pending_checks,
            log_level=env.log_level,
        )
    )


def load_config(config_path: Path | None = None) -> QemistryConfig:
    """Load the queue file named on the command line, or the first of
    CONFIG_FILENAMES present in the working directory. Without either,
    only environment settings apply.

    Raises:
        FileNotFoundError: If ``config_path`` is given but missing.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise FileNotFoundError(f"Queue file not found: {config_path}")
        return read_queue_file(config_path)

    found = next((Path(name) for name in CONFIG_FILENAMES if Path(name).is_file()), None)
    if found is not None:
        return read_queue_file(found)

    logger.info("No queue file found, using environment settings")
    return config_from_env()


def build_registry(
    config: QemistryConfig,
    sink: CommandSink,
    scheduler: DeferredScheduler | None = None,
) -> QueueRegistry:
    """Create a registry holding every queue declared in ``config``.

    Path conditions resolve against a DictStateResolver over
    ``config.state``, which the returned registry shares with the config.
    """
    state = DictStateResolver(config.state)
    registry = QueueRegistry(state, sink, scheduler=scheduler, settings=config.settings)

    for queue_config in config.queues:
        queue = registry.create(
            queue_config.name,
            queue_config.conditions,
            list(queue_config.options),
        )
        for action in queue_config.actions:
            if isinstance(action, ActionConfig):
                queue.add(action.to_action())
            else:
                queue.add(action)
        logger.info(f"Queue '{queue.name}' loaded with {queue.action_count} action(s)")

    return registry
