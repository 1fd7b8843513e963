"""Pydantic models for YAML configuration schema."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

OptionName = Literal["strict_order", "single_step"]


class GlobalSettings(BaseModel):
    """Global scheduler settings."""

    verify_delay: float = Field(
        default=0.5,
        gt=0,
        description="Seconds to wait before checking that an action consumed its condition",
    )
    cancel_pending_checks: bool = Field(
        default=True,
        description="Cancel armed consumption checks when a queue is reset or deleted",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level for the command line driver",
    )

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()


class ActionConfig(BaseModel):
    """An action with explicit code and optional gates."""

    code: str | list[str] = Field(description="Command string(s) sent when the action runs")
    required: str | list[str] | None = Field(
        default=None,
        description="State path(s) that must be true for the action to run",
    )
    consumed: str | list[str] | None = Field(
        default=None,
        description="State path(s) expected to turn false once the action has run",
    )

    def to_action(self) -> dict[str, Any]:
        """Return the action in the mapping shape accepted by Queue.add."""
        return self.model_dump(exclude_none=True)


class QueueConfig(BaseModel):
    """A queue declared in the configuration file."""

    name: str = Field(description="Unique queue name")
    conditions: bool | str | list[str] = Field(
        description="State path(s) gating the whole queue, or a constant",
    )
    options: list[OptionName] = Field(
        default_factory=list,
        description="Queue options (strict_order, single_step)",
    )
    actions: list[str | list[str] | ActionConfig] = Field(
        default_factory=list,
        description="Initial actions, in order",
    )

    @field_validator("options", mode="before")
    @classmethod
    def single_option_as_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value


class QemistryConfig(BaseModel):
    """Root configuration model for qemistry.yaml."""

    queues: list[QueueConfig] = Field(
        default_factory=list,
        description="Queues to create at startup",
    )
    state: dict[str, Any] = Field(
        default_factory=dict,
        description="Initial state tree that path conditions resolve against",
    )
    settings: GlobalSettings = Field(
        default_factory=GlobalSettings,
        description="Global scheduler settings",
    )

    @model_validator(mode="after")
    def unique_queue_names(self) -> "QemistryConfig":
        seen: set[str] = set()
        for queue in self.queues:
            if queue.name in seen:
                raise ValueError(f"Duplicate queue name '{queue.name}'")
            seen.add(queue.name)
        return self

    def get_queue(self, name: str) -> QueueConfig | None:
        """Get a queue definition by name."""
        for queue in self.queues:
            if queue.name == name:
                return queue
        return None
