"""Turn selected local commits into a GitHub pull request.

The flow, one step after another:

  resolve repo -> list commits -> select commits -> rebase/push
  -> (branch already has a PR? stop) -> edit message -> create PR
  -> select assignees -> request review -> open browser

Blocking helpers (git, HTTP) run in the default executor so the read-only
lookups of the first step, and PR creation with the reviewer prompt, can
overlap. Any fatal condition raises; nothing created so far is rolled back.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click

from pt_core import git_ops, pulls, rebase
from pt_core.assignees import AssigneeType, select_assignees
from pt_core.branches import branch_from_message, slug_from_message
from pt_core.config import Config
from pt_core.editor import edit_pull_request
from pt_core.git_ops import BranchNames, Commit, RepoKey
from pt_core.graphql import GitHubClient, GitHubError
from pt_core.pulls import PullRequest, RepoInfo
from pt_core.selector import Option, Selector
from pt_core.tasks import StepSkipped, done, step

_log = logging.getLogger("pt.pr")


class PrFlowError(Exception):
    """A condition that stops the PR flow (no commits, no title, ...)."""


@dataclass
class RepoContext:
    repo: RepoKey
    branches: BranchNames
    prefix: str
    info: RepoInfo
    commits: list[Commit]
    prs: list[PullRequest]


async def _in_thread(fn, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))


def resolve_branches(cwd: Optional[Path] = None) -> BranchNames:
    branches = git_ops.get_branch_names(cwd=cwd)
    if branches.head is None:
        raise PrFlowError("Cannot determine HEAD branch name")
    if branches.upstream is None:
        raise PrFlowError(f"Cannot determine upstream branch for {branches.head}")
    return branches


def resolve_prefix(config: Config, cwd: Optional[Path] = None) -> str:
    if config.branch_prefix is not None:
        return config.branch_prefix
    return git_ops.get_email_username(cwd=cwd)


async def collect_context(client: GitHubClient, config: Config,
                          cwd: Optional[Path] = None) -> RepoContext:
    """Resolve the repo and fetch repo info, commits and open PRs concurrently."""
    prefix = resolve_prefix(config, cwd)
    branches = resolve_branches(cwd)
    repo = git_ops.get_repo_key(branches.remote, cwd=cwd)
    _log.info("pr: %s on %s (upstream %s)", repo.full_name, branches.head, branches.upstream)

    with step("Fetching repository info") as s:
        info, commits, prs = await asyncio.gather(
            _in_thread(pulls.get_repo_info, client, repo),
            _in_thread(git_ops.list_commits, branches.upstream, cwd=cwd),
            _in_thread(pulls.get_pulls, client, repo),
        )
        if info is None:
            raise PrFlowError(f"Failed to get repository ID for {repo.full_name}")
        if not commits:
            raise PrFlowError(f"No commits to push after {branches.upstream}")
        s.title = (f"Found {repo.full_name}: {len(commits)} publishable commits, "
                   f"{len(prs)} existing PRs")

    return RepoContext(repo=repo, branches=branches, prefix=prefix, info=info,
                       commits=commits, prs=prs)


def commit_label(commit: Commit, prefix: str = "", prs: Optional[list[PullRequest]] = None) -> str:
    """fzf label: short hash, author, subject and the PR it would update."""
    label = (f"{click.style(commit.short_hash, fg='red')} "
             f"{click.style(f'[{commit.author}]', fg='blue')} "
             f"{click.style(commit.message, fg='white')}")
    if prs:
        pr = pulls.find_pull_for_branch(prs, branch_from_message(prefix, commit.message))
        if pr is not None:
            label += " " + click.style(f"(updates #{pr.number})", fg="bright_yellow")
    return label


def select_commits(selector: Selector, ctx: RepoContext) -> list[Commit]:
    """Pick the commits to publish; a lone commit is picked without asking."""
    if len(ctx.commits) == 1:
        return list(ctx.commits)

    options = [
        Option(id=c.hash, label=commit_label(c, ctx.prefix, ctx.prs), value=c)
        for c in ctx.commits
    ]
    chosen = selector.select("Select commit(s) for PR:", options)
    return [o.value for o in chosen]


def rebase_and_push(ctx: RepoContext, selected: list[Commit], branch: str,
                    cwd: Optional[Path] = None) -> Commit:
    """Move *selected* onto the upstream and force-push them to *branch*."""
    upstream = ctx.branches.upstream
    git_dir = git_ops.get_git_dir(cwd=cwd)

    with step("Rebasing commits"):
        todo = rebase.build_rebase_todo(ctx.commits, [c.hash for c in selected])
        rebase.rebase_commits(todo, upstream, git_dir, cwd=cwd)

    with step(f"Pushing to {ctx.branches.remote}/{branch}") as s:
        pushed = rebase.find_pushed_commit(upstream, len(selected), cwd=cwd)
        rebase.push_commit(ctx.branches.remote, pushed.hash, branch, cwd=cwd)
        s.title = f"Pushed {pushed.short_hash} to {ctx.branches.remote}/{branch}"
    return pushed


def enable_auto_merge(client: GitHubClient, pr: PullRequest) -> None:
    with step("Enabling auto merge"):
        try:
            pulls.enable_auto_merge(client, pr.id, merge_method="SQUASH")
        except GitHubError as e:
            _log.info("pr: auto merge unavailable for #%d: %s", pr.number, e)
            raise StepSkipped("Auto merge not available") from e


def request_reviewers(client: GitHubClient, pr: PullRequest, reviewers) -> None:
    if not reviewers:
        return
    user_ids = [a.id for a in reviewers if a.type is AssigneeType.USER]
    team_ids = [a.id for a in reviewers if a.type is AssigneeType.TEAM]
    with step(f"Requesting review from {', '.join(a.slug for a in reviewers)}"):
        try:
            pulls.request_review(client, pr.id, user_ids, team_ids)
        except GitHubError as e:
            _log.warning("pr: review request for #%d failed: %s", pr.number, e)
            raise StepSkipped(f"Review request failed: {e}") from e


async def run_pr(client: GitHubClient, selector: Selector, config: Config, *,
                 draft: bool = False, auto_merge: bool = False,
                 cwd: Optional[Path] = None,
                 open_url: Callable[[str], object] = click.launch) -> PullRequest:
    """Run the whole flow; returns the created (or updated) pull request."""
    ctx = await collect_context(client, config, cwd)

    selected = select_commits(selector, ctx)
    if not selected:
        raise PrFlowError("No commits selected")

    # The newest selected commit ends up at the tip of the pushed branch
    target = [c for c in reversed(ctx.commits) if c in selected][-1]
    if not slug_from_message(target.message):
        raise PrFlowError(f"Cannot derive a branch name from {target.message!r}")
    branch = branch_from_message(ctx.prefix, target.message)
    existing = pulls.find_pull_for_branch(ctx.prs, branch)

    await _in_thread(rebase_and_push, ctx, selected, branch, cwd=cwd)

    if existing is not None:
        done(f"Updated #{existing.number} {existing.url}".rstrip())
        return existing

    message = edit_pull_request(target, git_ops.get_git_dir(cwd=cwd))
    if not message.title:
        raise PrFlowError("Missing PR title, aborting")

    create = _in_thread(
        pulls.create_pull, client,
        repository_id=ctx.info.repo_id,
        base_ref_name=ctx.info.default_branch,
        head_ref_name=branch,
        title=message.title,
        body=message.body,
        draft=draft,
    )
    choose = _in_thread(select_assignees, selector, client, ctx.repo, config.ignore_patterns())
    pr, reviewers = await asyncio.gather(create, choose)
    done(f"Created {'draft ' if draft else ''}pull request #{pr.number}")

    if auto_merge:
        enable_auto_merge(client, pr)

    request_reviewers(client, pr, reviewers)

    if pr.url:
        open_url(pr.url)
    return pr


def select_commit_hashes(selector: Selector, cwd: Optional[Path] = None) -> list[str]:
    """Prompt over the unpublished commits and return the chosen hashes."""
    branches = resolve_branches(cwd)
    commits = git_ops.list_commits(branches.upstream, cwd=cwd)
    if not commits:
        raise PrFlowError(f"No commits after {branches.upstream}")
    options = [Option(id=c.hash, label=commit_label(c), value=c) for c in commits]
    return [o.id for o in selector.select("Select commit(s):", options)]
