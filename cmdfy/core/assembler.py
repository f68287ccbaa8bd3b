"""
Renders a CommandResult's steps into one shell command line
"""

from typing import List

from .errors import AssemblyError
from .models import CommandResult, CommandStep

QUOTE_CHARS = ('"', "'")


def quote_arg(arg: str) -> str:
    """Wrap an argument containing whitespace in double quotes.

    Arguments that already start with a quote are left alone; embedded
    quotes are not escaped.
    """
    if any(ch.isspace() for ch in arg) and not arg.startswith(QUOTE_CHARS):
        return f'"{arg}"'
    return arg


def render_step(step: CommandStep) -> str:
    return " ".join([step.tool] + [quote_arg(arg) for arg in step.args])


def assemble(result: CommandResult) -> str:
    """Join the steps with their operators, e.g. `git status && ls -la`"""
    parts: List[str] = []
    last = len(result.steps) - 1

    for index, step in enumerate(result.steps):
        parts.append(render_step(step))
        if index == last:
            break
        if not step.op:
            raise AssemblyError(
                f"step {index + 1} ({step.tool}) has no operator but is followed by another step"
            )
        parts.append(step.op)

    return " ".join(parts)
