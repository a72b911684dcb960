"""Reorder unpublished commits and push the selected ones.

Selected commits are moved directly on top of the upstream branch so the
pushed ref contains only them; the remaining commits are replayed after.
The rebase is driven non-interactively: the todo list is written to a file
and ``GIT_SEQUENCE_EDITOR`` copies it over the list git generates.
"""

import logging
import os
import shlex
from pathlib import Path
from typing import Optional, Sequence

from pt_core.git_ops import Commit, GitError, list_commits, run_git

_log = logging.getLogger("pt.rebase")

TODO_FILENAME = "PT_REBASE_TODO"


class RebaseError(Exception):
    """Raised when the rebase fails. The rebase has been aborted by then."""


def order_selected(commits: Sequence[Commit], selected_shas: Sequence[str]) -> list[str]:
    """Selected shas in history order, oldest first."""
    wanted = set(selected_shas)
    return [c.hash for c in reversed(commits) if c.hash in wanted]


def build_rebase_todo(commits: Sequence[Commit], selected_shas: Sequence[str]) -> str:
    """Build the interactive-rebase todo list.

    *commits* is newest first, as returned by ``git log``. Selected commits
    are picked first, then the rest, each group oldest first.
    """
    selected = order_selected(commits, selected_shas)
    chosen = set(selected)
    rest = [c.hash for c in reversed(commits) if c.hash not in chosen]
    return "\n".join(f"pick {sha}" for sha in [*selected, *rest]) + "\n"


def rebase_commits(todo: str, upstream: str, git_dir: Path,
                   cwd: Optional[Path] = None) -> None:
    """Run ``git rebase --interactive --autostash`` with *todo* as the plan.

    On any failure ``git rebase --abort`` runs before RebaseError is raised.
    """
    todo_path = git_dir / TODO_FILENAME
    todo_path.write_text(todo)

    env = dict(os.environ)
    env["GIT_SEQUENCE_EDITOR"] = f"cp {shlex.quote(str(todo_path))}"

    try:
        run_git("rebase", "--interactive", "--autostash", upstream, cwd=cwd, env=env)
    except GitError as e:
        _log.warning("rebase onto %s failed, aborting", upstream)
        run_git("rebase", "--abort", cwd=cwd, check=False)
        raise RebaseError(f"Failed to rebase\n{e}") from e
    finally:
        try:
            todo_path.unlink()
        except OSError:
            pass


def find_pushed_commit(upstream: str, selected_count: int,
                       cwd: Optional[Path] = None) -> Commit:
    """After the rebase, the newest of the selected commits.

    It is the ``selected_count``-th commit above the upstream.
    """
    commits = list_commits(upstream, cwd=cwd)
    if selected_count < 1 or selected_count > len(commits):
        raise RebaseError(
            f"Expected at least {selected_count} commits above {upstream}, found {len(commits)}"
        )
    return commits[len(commits) - selected_count]


def push_commit(remote: str, sha: str, branch: str, cwd: Optional[Path] = None) -> None:
    """Force-push *sha* to ``refs/heads/<branch>`` on *remote*."""
    run_git("push", "--force", remote, f"{sha}:refs/heads/{branch}", cwd=cwd)
