"""Terminal progress reporting for multi-step commands.

Each step shows a spinner while it runs and leaves a one-line result:
``✔`` done, ``✖`` failed, ``↓`` skipped. Output goes to stderr so stdout
stays clean for commands that print data (``pt select-commit``).
"""

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True, highlight=False)


class StepSkipped(Exception):
    """Raise inside ``step()`` to mark the step skipped instead of failed."""


class Step:
    def __init__(self, title: str):
        self.title = title


def done(message: str) -> None:
    console.print(f"[green]✔[/green] {escape(message)}")


def failed(message: str) -> None:
    console.print(f"[red]✖[/red] {escape(message)}")


def skipped(message: str) -> None:
    console.print(f"[yellow]↓[/yellow] {escape(message)} [dim]\\[skipped][/dim]")


@contextmanager
def step(title: str) -> Iterator[Step]:
    """Run a block under a spinner titled *title*.

    The block may rename the step (``s.title = ...``) to change the final
    line, or raise StepSkipped.
    """
    s = Step(title)
    try:
        with console.status(escape(title)):
            yield s
    except StepSkipped as e:
        skipped(str(e) or s.title)
        return
    except Exception:
        failed(s.title)
        raise
    done(s.title)
