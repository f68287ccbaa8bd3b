"""
Core functionality for cmdfy
"""

from .errors import (
    CmdfyError,
    ConfigError,
    ProviderNotFoundError,
    ProviderInitError,
    GenerationError,
    NoEligibleProviders,
    AssemblyError,
    SelectionError,
    ExecutionError,
    HistoryError,
)
from .models import CommandStep, CommandResult, Metrics, ProviderResult, ProviderSettings, SystemMetadata, FewShotExample
from .llm import DeadlineClient, GenerationContext, LLMProvider, LLMManager, ProviderRegistry
from .compare import ComparisonEngine
from .selection import SelectionEvent, SelectionState, SelectionView, initial_state, transition, run_selection
from .assembler import assemble
from .safety import Decision, ExecutionGate
from .executor import CommandExecutor
from .history import HistoryEntry, HistoryStore

__all__ = [
    "CmdfyError",
    "ConfigError",
    "ProviderNotFoundError",
    "ProviderInitError",
    "GenerationError",
    "NoEligibleProviders",
    "AssemblyError",
    "SelectionError",
    "ExecutionError",
    "HistoryError",
    "CommandStep",
    "CommandResult",
    "Metrics",
    "ProviderResult",
    "ProviderSettings",
    "SystemMetadata",
    "FewShotExample",
    "DeadlineClient",
    "GenerationContext",
    "LLMProvider",
    "LLMManager",
    "ProviderRegistry",
    "ComparisonEngine",
    "SelectionEvent",
    "SelectionState",
    "SelectionView",
    "initial_state",
    "transition",
    "run_selection",
    "assemble",
    "Decision",
    "ExecutionGate",
    "CommandExecutor",
    "HistoryEntry",
    "HistoryStore",
]
