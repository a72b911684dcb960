"""``pt select-commit`` — pick unpublished commits, print their hashes."""

import click

from pt_core.cli import cli
from pt_core.cli.helpers import FATAL_ERRORS, _log, fail, make_selector
from pt_core.pr_flow import select_commit_hashes


@cli.command("select-commit")
def select_commit_cmd():
    """Pick commits after the upstream branch and print their hashes.

    One hash per line, handy for scripting:

    \b
      git show $(pt select-commit)
    """
    try:
        hashes = select_commit_hashes(make_selector())
    except FATAL_ERRORS as e:
        _log.error("select-commit: %s", e)
        fail(str(e))
    for sha in hashes:
        click.echo(sha)
