"""Click CLI definitions for pt.

The ``cli`` Click group and ``main`` entry point live here. Commands are
split into submodules:
- cli.pr       — ``pt pr``: publish commits as a pull request
- cli.commits  — ``pt select-commit``: pick commits and print their hashes
"""

import click

from pt_core.cli.helpers import CONTEXT_SETTINGS, HelpGroup


@click.group(cls=HelpGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="pt-cli", prog_name="pt")
def cli():
    """pt — turn local git commits into GitHub pull requests."""


# ---------------------------------------------------------------------------
# Import submodules to register their commands on ``cli``.
# This must be at the bottom of the file, after ``cli`` is defined.
# ---------------------------------------------------------------------------
from pt_core.cli import pr, commits  # noqa: E402, F401


def main():
    cli()
