"""GitHub GraphQL client with cursor pagination."""

import json
import logging
import re
import shutil
import subprocess
import urllib.error
import urllib.request
from typing import Any, Callable, Iterator, Optional

from pt_core.config import ConfigError
from pt_core.paths import log_shell_command, token_file

_log = logging.getLogger("pt.graphql")

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"

PageInfoPicker = Callable[[dict], dict]


class GitHubError(Exception):
    """Raised on transport or HTTP failures talking to GitHub."""


class GraphQLError(GitHubError):
    """Raised when a GraphQL response carries errors."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        messages = "; ".join(e.get("message", str(e)) for e in errors) or "unknown error"
        super().__init__(messages)


def get_access_token() -> str:
    """Return the GitHub token from the pt token file or ``gh auth token``."""
    path = token_file()
    if path.exists():
        token = path.read_text().strip()
        if token:
            return token

    if not shutil.which("gh"):
        raise ConfigError(
            f"No GitHub token found. Write one to {path} "
            "or install and authenticate the GitHub CLI (gh auth login)."
        )
    cmd = ["gh", "auth", "token"]
    log_shell_command(cmd, prefix="gh")
    result = subprocess.run(cmd, capture_output=True, text=True)
    token = result.stdout.strip()
    if result.returncode != 0 or not token:
        log_shell_command(cmd, prefix="gh", returncode=result.returncode or 1)
        raise ConfigError("Cannot get token from `gh auth token`. Run: gh auth login")
    return token


def _operation_name(query: str) -> str:
    m = re.search(r"\b(query|mutation)\s+(\w+)", query)
    if m:
        return f"{m.group(1)} {m.group(2)}"
    return "query"


class PageStream:
    """Lazy sequence of response pages for a paginated query.

    Each iteration starts over from the first page, passing ``cursor=None``,
    then follows ``endCursor`` while ``hasNextPage`` is true. Pages are
    yielded in the order the server returns them; errors propagate.
    """

    def __init__(self, client: "GitHubClient", query: str, variables: dict,
                 pick_page_info: PageInfoPicker):
        self.client = client
        self.query = query
        self.variables = variables
        self.pick_page_info = pick_page_info

    def __iter__(self) -> Iterator[dict]:
        cursor = None
        while True:
            page = self.client.request(self.query, {**self.variables, "cursor": cursor})
            page_info = self.pick_page_info(page)
            yield page
            if not page_info.get("hasNextPage"):
                return
            cursor = page_info.get("endCursor")


class GitHubClient:
    """Minimal GraphQL client for api.github.com."""

    def __init__(self, token: str, url: str = GITHUB_GRAPHQL_URL, timeout: Optional[float] = None):
        self.token = token
        self.url = url
        self.timeout = timeout

    def request(self, query: str, variables: Optional[dict] = None) -> dict:
        """POST a query and return its ``data`` object."""
        payload = json.dumps({"query": query, "variables": variables or {}}).encode()
        req = urllib.request.Request(
            self.url,
            data=payload,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": "pt-cli",
            },
            method="POST",
        )

        op = _operation_name(query)
        _log.debug("graphql: %s %s", op, {k: v for k, v in (variables or {}).items() if k != "input"})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body: dict[str, Any] = json.loads(resp.read())
        except urllib.error.HTTPError as e:
            detail = e.read().decode(errors="replace")[:200] if e.fp else ""
            _log.warning("graphql: %s failed: HTTP %d", op, e.code)
            raise GitHubError(f"GitHub API returned HTTP {e.code}: {detail or e.reason}") from e
        except urllib.error.URLError as e:
            _log.warning("graphql: %s failed: %s", op, e.reason)
            raise GitHubError(f"Cannot reach GitHub API: {e.reason}") from e

        if body.get("errors"):
            _log.info("graphql: %s returned errors: %s", op, body["errors"])
            raise GraphQLError(body["errors"])
        return body.get("data") or {}

    def paginate(self, query: str, variables: dict, pick_page_info: PageInfoPicker) -> PageStream:
        """Return a PageStream for a query taking a ``$cursor`` variable."""
        return PageStream(self, query, variables, pick_page_info)
