"""
Execution gate: confirms dangerous commands before they run
"""

import logging
from enum import Enum
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from .models import CommandResult

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    """Outcome of the gate"""
    PROCEED = "proceed"
    ABORT = "abort"


class ExecutionGate:
    """Asks for confirmation before a command flagged dangerous is run"""

    def __init__(self, console: Optional[Console] = None, input_func: Optional[Callable[[str], str]] = None):
        self.console = console or Console()
        self.input_func = input_func or self.console.input

    def authorize(self, result: CommandResult, rendered: str) -> Decision:
        """Return PROCEED or ABORT for the rendered command"""
        if not result.dangerous:
            return Decision.PROCEED

        self.console.print(
            f"[bold red]\\[WARNING][/bold red] This command is marked as dangerous: {escape(result.explanation)}"
        )
        self.console.print(rendered, style="cyan", markup=False, highlight=False)

        try:
            answer = self.input_func("Are you sure you want to execute it? \\[y/N]: ")
        except EOFError:
            answer = ""

        if answer.strip().lower() == "y":
            logger.info("Dangerous command confirmed by user")
            return Decision.PROCEED

        logger.info("Dangerous command rejected by user")
        return Decision.ABORT
