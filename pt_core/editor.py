"""Edit a pull request title/body in the user's ``$EDITOR``.

The template is the commit subject, a blank line and the commit body. It is
written to ``PULLREQ_EDITMSG`` in the git directory (next to git's own
``COMMIT_EDITMSG``). After the editor exits, the first line is the title and
everything after it, trimmed, is the body.
"""

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pt_core.git_ops import Commit
from pt_core.paths import log_shell_command

EDIT_FILENAME = "PULLREQ_EDITMSG"


class EditorError(Exception):
    """Raised when the editor cannot be started."""


@dataclass
class PullRequestMessage:
    title: str
    body: str


def find_editor() -> str:
    """Return the user's preferred editor."""
    editor = os.environ.get("EDITOR")
    if editor:
        return editor
    for candidate in ("vim", "vi", "nano"):
        if shutil.which(candidate):
            return candidate
    return "vi"


def build_template(commit: Commit) -> str:
    split = "\n\n" if commit.body else ""
    return f"{commit.message}{split}{commit.body}"


def parse_message(contents: str) -> PullRequestMessage:
    title, _, body = contents.partition("\n")
    return PullRequestMessage(title=title.strip(), body=body.strip())


def edit_pull_request(commit: Commit, git_dir: Path) -> PullRequestMessage:
    """Open the PR template for *commit* in the editor and parse the result.

    An empty title comes back as ``""``; callers treat that as an abort.
    """
    path = git_dir / EDIT_FILENAME
    path.write_text(build_template(commit))

    # $EDITOR may carry arguments ("code --wait")
    cmd = [*shlex.split(find_editor()), str(path)]
    log_shell_command(cmd, prefix="editor")
    try:
        ret = subprocess.call(cmd)
    except OSError as e:
        raise EditorError(f"Cannot start editor {cmd[0]!r}: {e}") from e
    if ret != 0:
        log_shell_command(cmd, prefix="editor", returncode=ret)

    return parse_message(path.read_text())
