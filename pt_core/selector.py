"""Interactive selection of items.

``Selector`` is the interface the commands depend on. ``FzfSelector`` pipes
``"<id>\\t<label>"`` lines into fzf as they are produced and maps the lines
fzf prints back to the options passed in. ``FakeSelector`` answers from a
fixed list (or a callable) and records what it was asked.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence, Union

from pt_core.paths import log_shell_command

_log = logging.getLogger("pt.selector")

# fzf exit codes meaning "nothing chosen"
FZF_NO_MATCH = 1
FZF_INTERRUPTED = 130


class SelectorError(Exception):
    """Raised when the selector process cannot be started or crashes."""


@dataclass
class Option:
    """One selectable line.

    ``id`` is what comes back from the selector, ``label`` is what the user
    sees, ``value`` carries the record it stands for.
    """

    id: str
    label: str
    value: Any = None


class Selector(ABC):
    @abstractmethod
    def select(self, prompt: str, options: Iterable[Option]) -> list[Option]:
        """Let the user pick any number of *options*; [] when none are picked."""


def _single_line(label: str) -> str:
    return " ".join(label.replace("\t", " ").split("\n")).strip()


class FzfSelector(Selector):
    def __init__(self, fzf: str = "fzf", extra_args: Sequence[str] = ()):
        self.fzf = fzf
        self.extra_args = list(extra_args)

    def command(self, prompt: str) -> list[str]:
        return [
            self.fzf,
            "--ansi",
            "--height=40%",
            "--reverse",
            f"--header={prompt}",
            "--delimiter=\t",
            "--with-nth=2..",
            "-m",
            *self.extra_args,
        ]

    def select(self, prompt: str, options: Iterable[Option]) -> list[Option]:
        cmd = self.command(prompt)
        log_shell_command(cmd, prefix="fzf")
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise SelectorError(f"Cannot start {self.fzf}: {e}") from e

        by_id: dict[str, Option] = {}
        try:
            self._feed(proc, options, by_id)
        except BaseException:
            proc.kill()
            proc.wait()
            raise

        output = proc.stdout.read()
        returncode = proc.wait()

        if returncode in (FZF_NO_MATCH, FZF_INTERRUPTED):
            _log.debug("fzf: nothing selected (rc=%d)", returncode)
            return []
        if returncode != 0:
            log_shell_command(cmd, prefix="fzf", returncode=returncode)
            raise SelectorError(f"{self.fzf} exited with status {returncode}")

        selected = []
        for line in output.splitlines():
            if not line:
                continue
            option = by_id.get(line.split("\t", 1)[0])
            if option is not None:
                selected.append(option)
        return selected

    @staticmethod
    def _feed(proc: subprocess.Popen, options: Iterable[Option], by_id: dict[str, Option]) -> None:
        """Stream options into fzf, closing its input when production ends."""
        try:
            for option in options:
                by_id[option.id] = option
                proc.stdin.write(f"{option.id}\t{_single_line(option.label)}\n")
                proc.stdin.flush()
        except BrokenPipeError:
            # fzf exited before we finished (the user already chose)
            _log.debug("fzf closed its input early")
        finally:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass


ChooseFn = Callable[[str, list[Option]], Sequence[str]]


class FakeSelector(Selector):
    """In-memory selector answering with preset ids."""

    def __init__(self, choose: Union[Sequence[str], ChooseFn] = ()):
        self.choose = choose
        self.calls: list[tuple[str, list[Option]]] = []

    def select(self, prompt: str, options: Iterable[Option]) -> list[Option]:
        options = list(options)
        self.calls.append((prompt, options))
        ids = self.choose(prompt, options) if callable(self.choose) else self.choose
        by_id = {o.id: o for o in options}
        return [by_id[i] for i in ids if i in by_id]

    @property
    def prompts(self) -> list[str]:
        return [prompt for prompt, _ in self.calls]
