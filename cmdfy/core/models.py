"""
Data model shared by providers, the comparison engine and the CLI
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

# Connectors a step may use to join the next one
OPERATORS = ("|", "&&", ";", "||", ">", ">>")


class CommandStep(BaseModel):
    """A single step in a command pipeline"""
    tool: str = Field(..., min_length=1, description="Primary command, e.g. git or grep")
    args: List[str] = Field(default_factory=list)
    op: str = Field("", description="Connector to the next step, empty for the last one")

    @field_validator("args", mode="before")
    @classmethod
    def _none_args(cls, value):
        return [] if value is None else value

    @field_validator("op", mode="before")
    @classmethod
    def _check_op(cls, value):
        if value is None:
            return ""
        value = str(value).strip()
        if value and value not in OPERATORS:
            raise ValueError(f"unsupported operator {value!r}")
        return value


class Metrics(BaseModel):
    """Per-call measurements filled in by the provider"""
    latency: str = ""
    token_count: int = Field(0, ge=0)


class CommandResult(BaseModel):
    """The full generated command pipeline"""
    steps: List[CommandStep] = Field(..., min_length=1)
    explanation: str = ""
    dangerous: bool = False
    metrics: Metrics = Field(default_factory=Metrics)

    @model_validator(mode="after")
    def _check_connectors(self):
        for index, step in enumerate(self.steps[:-1]):
            if not step.op:
                raise ValueError(
                    f"step {index + 1} ({step.tool}) has no operator but is followed by another step"
                )
        return self


class ProviderSettings(BaseModel):
    """Connection settings for one provider"""
    api_key: str = ""
    base_url: str = ""
    model: str = ""


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider's invocation in compare mode"""
    name: str
    result: Optional[CommandResult] = None
    error: Optional[Exception] = None

    def __post_init__(self):
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result or error must be set")

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class FewShotExample:
    """A previously accepted query/command pair used as prompt context"""
    query: str
    command: str
    provider: str = ""


@dataclass(frozen=True)
class SystemMetadata:
    """Context about the user's system that helps generation"""
    os: str
    shell: str
    available_commands: Tuple[str, ...] = ()
    current_dir_files: Tuple[str, ...] = ()
    previous_error: Optional[str] = None
    few_shot_examples: Tuple[FewShotExample, ...] = field(default_factory=tuple)
