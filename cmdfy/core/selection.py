"""
Interactive selection between compare-mode results.

The state machine is pure: `transition(state, event)` returns a new state
and knows nothing about terminals. `SelectionView` renders a state with
rich, and `run_selection` wires key presses to events.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from rich.columns import Columns
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text
from rich import box

from .assembler import assemble
from .errors import SelectionError
from .models import ProviderResult


class SelectionEvent(str, Enum):
    """Inputs understood by the selection state machine"""
    MOVE_RIGHT = "move-right"
    MOVE_LEFT = "move-left"
    CONFIRM = "confirm"
    QUIT = "quit"
    RESIZE = "resize"


@dataclass(frozen=True)
class SelectionState:
    entries: Tuple[ProviderResult, ...]
    cursor: int = 0
    quitting: bool = False
    chosen: Optional[ProviderResult] = None

    @property
    def current(self) -> ProviderResult:
        return self.entries[self.cursor]


def initial_state(entries: Sequence[ProviderResult]) -> SelectionState:
    if not entries:
        raise SelectionError("nothing to select from")
    return SelectionState(entries=tuple(entries))


def transition(state: SelectionState, event: SelectionEvent) -> SelectionState:
    """Apply one event and return the next state"""
    if state.quitting:
        raise SelectionError(f"selection already finished, cannot {event.value}")

    count = len(state.entries)

    if event == SelectionEvent.MOVE_RIGHT:
        return replace(state, cursor=(state.cursor + 1) % count)
    if event == SelectionEvent.MOVE_LEFT:
        return replace(state, cursor=(state.cursor - 1 + count) % count)
    if event == SelectionEvent.CONFIRM:
        # Failed providers have nothing to run
        if not state.current.ok:
            return state
        return replace(state, chosen=state.current, quitting=True)
    if event == SelectionEvent.QUIT:
        return replace(state, chosen=None, quitting=True)
    if event == SelectionEvent.RESIZE:
        return state

    raise SelectionError(f"unknown event: {event}")


# Keys as returned by click.getchar()
KEY_BINDINGS = {
    "q": SelectionEvent.QUIT,
    "\x03": SelectionEvent.QUIT,          # ctrl+c
    "\x1b[C": SelectionEvent.MOVE_RIGHT,  # right arrow
    "\xe0M": SelectionEvent.MOVE_RIGHT,   # right arrow on Windows
    "l": SelectionEvent.MOVE_RIGHT,
    "\t": SelectionEvent.MOVE_RIGHT,
    "\x1b[D": SelectionEvent.MOVE_LEFT,   # left arrow
    "\xe0K": SelectionEvent.MOVE_LEFT,    # left arrow on Windows
    "h": SelectionEvent.MOVE_LEFT,
    "\x1b[Z": SelectionEvent.MOVE_LEFT,   # shift+tab
    "\r": SelectionEvent.CONFIRM,
    "\n": SelectionEvent.CONFIRM,
}


def event_for_key(key: str) -> Optional[SelectionEvent]:
    return KEY_BINDINGS.get(key)


class SelectionView:
    """Renders a SelectionState as side-by-side rich panels"""

    help_text = "Use arrow keys to navigate • Enter to select • q to quit"

    def __init__(self, width: int = 40):
        self.width = width

    def render(self, state: SelectionState) -> Group:
        panels = [
            self._render_entry(entry, selected=(index == state.cursor))
            for index, entry in enumerate(state.entries)
        ]
        return Group(Columns(panels), Text(self.help_text, style="dim"))

    def _render_entry(self, entry: ProviderResult, selected: bool) -> Panel:
        body = Text()
        if entry.error is not None:
            body.append("Error:\n", style="bold red")
            body.append(str(entry.error))
        else:
            result = entry.result
            body.append(assemble(result), style="bold green")
            body.append("\n\n")
            body.append(result.explanation, style="grey70")
            body.append(
                f"\n\nLatency: {result.metrics.latency}\nTokens: {result.metrics.token_count}",
                style="dim"
            )
            if result.dangerous:
                body.append("\n[DANGEROUS]", style="bold red")

        return Panel(
            body,
            title=f"[bold]{entry.name.upper()}[/bold]",
            width=self.width,
            box=box.DOUBLE if selected else box.ROUNDED,
            border_style="green_yellow" if selected else "blue"
        )


def run_selection(
    entries: Sequence[ProviderResult],
    read_key: Callable[[], str],
    console: Optional[Console] = None,
    view: Optional[SelectionView] = None
) -> Optional[ProviderResult]:
    """Let the user pick one result; returns None when they quit"""
    console = console or Console()
    view = view or SelectionView()
    state = initial_state(entries)

    with Live(view.render(state), console=console, auto_refresh=False, transient=True) as live:
        while not state.quitting:
            try:
                event = event_for_key(read_key())
            except KeyboardInterrupt:
                # click.getchar raises on ctrl+c
                event = SelectionEvent.QUIT
            if event is None:
                continue
            state = transition(state, event)
            live.update(view.render(state), refresh=True)

    return state.chosen
