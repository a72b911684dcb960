"""Tests for pt_core.rebase — todo construction, scripted rebase, push."""

from unittest.mock import patch, MagicMock, call

import pytest

from pt_core.git_ops import GitError
from pt_core.rebase import (
    TODO_FILENAME,
    RebaseError,
    build_rebase_todo,
    find_pushed_commit,
    order_selected,
    push_commit,
    rebase_commits,
)
from tests.conftest import make_commit


# Newest first, as git log returns them
COMMITS = [make_commit(4), make_commit(3), make_commit(2), make_commit(1)]
H = {n: str(n) * 40 for n in range(1, 5)}


class TestBuildRebaseTodo:
    def test_selected_first_then_rest_oldest_first(self):
        todo = build_rebase_todo(COMMITS, [H[3]])
        assert todo.splitlines() == [
            f"pick {H[3]}",
            f"pick {H[1]}",
            f"pick {H[2]}",
            f"pick {H[4]}",
        ]

    def test_multiple_selected_keep_history_order(self):
        # Selection order from the selector does not matter
        todo = build_rebase_todo(COMMITS, [H[4], H[2]])
        assert todo.splitlines() == [
            f"pick {H[2]}",
            f"pick {H[4]}",
            f"pick {H[1]}",
            f"pick {H[3]}",
        ]

    def test_already_in_place_is_identity(self):
        todo = build_rebase_todo(COMMITS, [H[1]])
        assert todo.splitlines() == [f"pick {H[n]}" for n in (1, 2, 3, 4)]

    def test_ends_with_newline(self):
        assert build_rebase_todo(COMMITS, [H[1]]).endswith("\n")

    def test_order_selected_ignores_unknown(self):
        assert order_selected(COMMITS, [H[3], "f" * 40]) == [H[3]]


class TestRebaseCommits:
    @patch("pt_core.rebase.run_git")
    def test_runs_interactive_rebase_with_sequence_editor(self, mock_rg, tmp_path):
        seen = {}

        def fake_run_git(*args, **kwargs):
            if args[0] == "rebase":
                seen["todo"] = (tmp_path / TODO_FILENAME).read_text()
                seen["env"] = kwargs["env"]
            return MagicMock(returncode=0)

        mock_rg.side_effect = fake_run_git
        rebase_commits("pick abc\n", "origin/main", tmp_path)

        args = mock_rg.call_args_list[0][0]
        assert args == ("rebase", "--interactive", "--autostash", "origin/main")
        assert seen["todo"] == "pick abc\n"
        assert seen["env"]["GIT_SEQUENCE_EDITOR"] == f"cp {tmp_path / TODO_FILENAME}"
        # Todo file is cleaned up
        assert not (tmp_path / TODO_FILENAME).exists()

    @patch("pt_core.rebase.run_git")
    def test_failure_aborts_before_raising(self, mock_rg, tmp_path):
        events = []

        def fake_run_git(*args, **kwargs):
            events.append(args)
            if args == ("rebase", "--interactive", "--autostash", "origin/main"):
                raise GitError("CONFLICT (content): Merge conflict in app.py")
            return MagicMock(returncode=0)

        mock_rg.side_effect = fake_run_git
        with pytest.raises(RebaseError, match="Merge conflict") as excinfo:
            rebase_commits("pick abc\n", "origin/main", tmp_path)

        assert events[-1] == ("rebase", "--abort")
        assert isinstance(excinfo.value.__cause__, GitError)
        assert not (tmp_path / TODO_FILENAME).exists()

    @patch("pt_core.rebase.run_git")
    def test_abort_is_unchecked(self, mock_rg, tmp_path):
        mock_rg.side_effect = [GitError("boom"), MagicMock(returncode=1)]
        with pytest.raises(RebaseError):
            rebase_commits("pick abc\n", "origin/main", tmp_path)
        assert mock_rg.call_args_list[1] == call("rebase", "--abort", cwd=None, check=False)


class TestFindPushedCommit:
    @patch("pt_core.rebase.list_commits")
    def test_counts_from_upstream(self, mock_lc):
        mock_lc.return_value = COMMITS
        # Two selected commits: the second-oldest above the upstream
        assert find_pushed_commit("origin/main", 2) == COMMITS[2]
        assert find_pushed_commit("origin/main", 1) == COMMITS[3]

    @patch("pt_core.rebase.list_commits")
    def test_too_few_commits(self, mock_lc):
        mock_lc.return_value = []
        with pytest.raises(RebaseError):
            find_pushed_commit("origin/main", 1)


@patch("pt_core.rebase.run_git")
def test_push_commit_force_pushes_refspec(mock_rg):
    push_commit("origin", "abc123", "alice/fix-bug")
    mock_rg.assert_called_once_with(
        "push", "--force", "origin", "abc123:refs/heads/alice/fix-bug", cwd=None,
    )
