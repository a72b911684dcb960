"""Shared test helpers for pt_core tests."""

import asyncio

import pytest

from pt_core.git_ops import Commit


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp dir so no test touches ~/.config/pt."""
    home = tmp_path / "config-home"
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


def run_async(coro):
    """Run an async coroutine in a fresh event loop (safe across tests)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def make_commit(n: int, message: str | None = None, body: str = "", author: str = "Alice") -> Commit:
    """Commit with a recognizable 40-char hash: make_commit(3).hash == '333...'."""
    return Commit(
        hash=str(n % 10) * 40,
        author=author,
        message=message or f"Commit number {n}",
        body=body,
    )
