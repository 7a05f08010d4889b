"""
Console prompts used by the interactive commands.

Thin layer over rich's Prompt that re-asks until input validates and turns
Ctrl-C / end-of-input into PromptCancelled.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from ..logging_config import get_logger

logger = get_logger(__name__)

Validator = Callable[[str], Optional[str]]


class PromptCancelled(Exception):
    """Raised when the user cancels a prompt."""

    pass


def ask_text(
    message: str,
    default: Optional[str] = None,
    validate: Optional[Validator] = None,
    console: Optional[Console] = None,
) -> str:
    """
    Ask for free text until it validates.

    Args:
        message: Prompt message
        default: Value offered as the editable default
        validate: Returns an error message for bad input, None for good input
        console: Rich console instance

    Returns:
        The accepted input

    Raises:
        PromptCancelled: If the user cancels
    """
    console = console or Console()
    while True:
        try:
            if default is None:
                value = Prompt.ask(f"[bold]{message}[/bold]", console=console)
            else:
                value = Prompt.ask(f"[bold]{message}[/bold]", default=default, console=console)
        except (KeyboardInterrupt, EOFError) as e:
            raise PromptCancelled(message) from e

        value = (value or "").strip()
        error = validate(value) if validate else None
        if error is None:
            return value

        logger.debug("Rejected input %r: %s", value, error)
        console.print(f"[red]✗ {error}[/red]")


def ask_select(
    message: str,
    options: Sequence[Tuple[str, str]],
    console: Optional[Console] = None,
) -> str:
    """
    Ask the user to pick one of several options.

    Args:
        message: Menu title
        options: (value, label) pairs, shown numbered in order
        console: Rich console instance

    Returns:
        The value of the chosen option
    """
    console = console or Console()
    lines: List[str] = [f"[bold blue]{message}[/bold blue]", ""]
    for number, (_, label) in enumerate(options, 1):
        lines.append(f"[cyan]{number}.[/cyan] {label}")

    console.print()
    console.print(Panel.fit("\n".join(lines), border_style="blue"))

    choices = [str(number) for number in range(1, len(options) + 1)]
    try:
        choice = Prompt.ask(
            "\n[bold]Choose an option[/bold]",
            choices=choices,
            default="1",
            console=console,
        )
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelled(message) from e

    return options[int(choice) - 1][0]
