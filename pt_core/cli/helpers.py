"""Shared helpers for the pt CLI package."""

import asyncio

import click

from pt_core.config import Config, ConfigError, load_config
from pt_core.editor import EditorError
from pt_core.git_ops import GitError
from pt_core.graphql import GitHubClient, GitHubError, get_access_token
from pt_core.paths import configure_logger
from pt_core.pr_flow import PrFlowError
from pt_core.rebase import RebaseError
from pt_core.selector import FzfSelector, Selector, SelectorError

_log = configure_logger("pt")

# Shared Click settings: make -h and --help both work everywhere
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

# Errors that end a command with a message instead of a traceback
FATAL_ERRORS = (
    ConfigError,
    EditorError,
    GitError,
    RebaseError,
    SelectorError,
    GitHubError,
    PrFlowError,
)


class HelpGroup(click.Group):
    """Click Group that treats 'help' as an alias for --help."""

    def resolve_command(self, ctx, args):
        if args and args[0] == "help" and super().get_command(ctx, "help") is None:
            args = ["--help"] + args[1:]
        return super().resolve_command(ctx, args)


def fail(message: str) -> None:
    """Print *message* in red to stderr and exit 1."""
    click.echo(click.style(message, fg="red"), err=True)
    raise SystemExit(1)


def make_config() -> Config:
    return load_config()


def make_client() -> GitHubClient:
    return GitHubClient(get_access_token())


def make_selector() -> Selector:
    return FzfSelector()


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)
