"""Git queries: remote, branch, user and commit lookups."""

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pt_core.paths import log_shell_command

# Field/record separators for `git log --format`
_FS = "\x1f"
_RS = "\x1e"
_LOG_FORMAT = f"%H{_FS}%an{_FS}%s{_FS}%b{_RS}"


class GitError(Exception):
    """Raised when a required git command fails."""


@dataclass(frozen=True)
class RepoKey:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class Commit:
    hash: str
    author: str
    message: str
    body: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass(frozen=True)
class BranchNames:
    head: Optional[str]
    upstream: Optional[str]
    remote: str = "origin"


def run_git(*args: str, cwd: Optional[str | Path] = None, check: bool = True,
            env: Optional[dict] = None) -> subprocess.CompletedProcess:
    """Run a git command and return result.

    Raises GitError (with git's stderr) on a non-zero exit when *check* is set.
    """
    cmd = ["git", *args]
    log_shell_command(cmd, prefix="git")
    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        env=env,
    )
    if result.returncode != 0:
        log_shell_command(cmd, prefix="git", returncode=result.returncode)
        if check:
            detail = (result.stderr or result.stdout or "").strip()
            raise GitError(f"git {' '.join(args)} failed (rc={result.returncode}): {detail}")
    return result


def parse_remote_url(url: str) -> Optional[RepoKey]:
    """Extract owner/repo from a git remote URL.

    Handles the usual forms:
    https://github.com/owner/repo.git
    git@github.com:owner/repo.git
    ssh://git@github.com:22/owner/repo
    """
    url = url.strip().rstrip("/")
    if not url:
        return None
    if url.endswith(".git"):
        url = url[:-4]

    if "://" in url:
        path = url.split("://", 1)[1]
        # Drop credentials and host (with optional port)
        path = path.split("/", 1)[1] if "/" in path else ""
    else:
        # scp-like syntax: [user@]host:path
        m = re.match(r"^(?:[^@/]+@)?[^:/]+:(.+)$", url)
        if not m:
            return None
        path = m.group(1)

    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        return None
    return RepoKey(owner=parts[-2], repo=parts[-1])


def get_remote_url(remote: str = "origin", cwd: Optional[Path] = None) -> str:
    return run_git("remote", "get-url", remote, cwd=cwd).stdout.strip()


def get_repo_key(remote: str = "origin", cwd: Optional[Path] = None) -> RepoKey:
    """Get the owner/repo pair for *remote*."""
    url = get_remote_url(remote, cwd=cwd)
    key = parse_remote_url(url)
    if key is None:
        raise GitError(f"Cannot determine GitHub repository from remote {remote!r} ({url})")
    return key


def get_email_username(cwd: Optional[Path] = None) -> str:
    """Return the lower-cased local part of git's user.email ('' when unset)."""
    result = run_git("config", "--get", "user.email", cwd=cwd, check=False)
    email = result.stdout.strip()
    if not email:
        return ""
    return email.split("@")[0].lower()


def get_git_dir(cwd: Optional[Path] = None) -> Path:
    """Absolute path to the git directory (handles worktrees)."""
    return Path(run_git("rev-parse", "--absolute-git-dir", cwd=cwd).stdout.strip())


def get_branch_names(cwd: Optional[Path] = None) -> BranchNames:
    """Current branch, its upstream, and the remote the upstream lives on.

    head/upstream are None when they cannot be determined (detached HEAD,
    no tracking branch).
    """
    result = run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd, check=False)
    head = result.stdout.strip() if result.returncode == 0 else ""
    # "HEAD" means detached
    if not head or head == "HEAD":
        return BranchNames(head=None, upstream=None)

    result = run_git("rev-parse", "--abbrev-ref", "@{upstream}", cwd=cwd, check=False)
    upstream = result.stdout.strip() if result.returncode == 0 else ""
    if not upstream:
        return BranchNames(head=head, upstream=None)

    result = run_git("config", "--get", f"branch.{head}.remote", cwd=cwd, check=False)
    remote = result.stdout.strip()
    if not remote or remote == ".":
        remote = upstream.split("/", 1)[0] if "/" in upstream else "origin"
    return BranchNames(head=head, upstream=upstream, remote=remote)


def parse_log(output: str) -> list[Commit]:
    """Parse output produced with ``_LOG_FORMAT``."""
    commits = []
    for record in output.split(_RS):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FS)
        if len(fields) < 4:
            continue
        sha, author, subject, body = fields[:4]
        commits.append(Commit(hash=sha, author=author, message=subject, body=body.strip()))
    return commits


def list_commits(upstream: str, cwd: Optional[Path] = None) -> list[Commit]:
    """Commits on HEAD that are not on *upstream*, newest first."""
    result = run_git("log", f"--format={_LOG_FORMAT}", f"{upstream}..HEAD", cwd=cwd)
    return parse_log(result.stdout)
