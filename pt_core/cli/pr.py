"""``pt pr`` — publish selected commits as a pull request."""

import click

from pt_core.cli import cli
from pt_core.cli.helpers import (
    FATAL_ERRORS,
    _log,
    fail,
    make_client,
    make_config,
    make_selector,
    run_async,
)
from pt_core.pr_flow import run_pr


@cli.command("pr")
@click.option("--draft", is_flag=True, default=False, help="Create the PR as a draft")
@click.option("--auto-merge", "auto_merge", is_flag=True, default=False,
              help="Enable auto merge (squash) on the created PR")
def pr_cmd(draft: bool, auto_merge: bool):
    """Push selected commits to a branch and open a pull request.

    Unpublished commits (those after the upstream branch) are offered in
    fzf; a single commit is picked automatically. The selected commits are
    rebased directly onto the upstream and force-pushed to a branch named
    after the newest one. If that branch already has an open PR, pt stops
    there. Otherwise $EDITOR opens with the commit message as the PR
    template (first line = title), the PR is created against the default
    branch, and you pick reviewers.

    \b
    Examples:
      pt pr
      pt pr --draft
      pt pr --auto-merge
    """
    try:
        config = make_config()
        client = make_client()
        pr = run_async(run_pr(client, make_selector(), config,
                              draft=draft, auto_merge=auto_merge))
    except FATAL_ERRORS as e:
        _log.error("pr: %s", e)
        fail(str(e))
    _log.info("pr: done #%d %s", pr.number, pr.url)
