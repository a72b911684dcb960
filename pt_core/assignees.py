"""Assignable users and teams for a repository."""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

import click

from pt_core.git_ops import RepoKey
from pt_core.graphql import GitHubClient, GraphQLError
from pt_core.selector import Option, Selector

_log = logging.getLogger("pt.assignees")

USER_ASSIGNEES_QUERY = """
query userAssignees($owner: String!, $repo: String!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    assignableUsers(first: 100, after: $cursor) {
      nodes {
        id
        login
        name
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""

ORG_INFO_QUERY = """
query orgInfo($owner: String!) {
  organization(login: $owner) {
    name
  }
}
"""

TEAM_ASSIGNEES_QUERY = """
query teamAssignees($owner: String!, $cursor: String) {
  organization(login: $owner) {
    teams(first: 100, after: $cursor) {
      nodes {
        id
        combinedSlug
        name
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""


class AssigneeType(enum.Enum):
    USER = "user"
    TEAM = "team"


@dataclass(frozen=True)
class Assignee:
    type: AssigneeType
    id: str
    slug: str
    name: Optional[str] = None


def is_organization(client: GitHubClient, owner: str) -> bool:
    """True when *owner* is an organization (GitHub errors for user logins)."""
    try:
        data = client.request(ORG_INFO_QUERY, {"owner": owner})
    except GraphQLError:
        return False
    return bool(data.get("organization"))


def _user_assignees(client: GitHubClient, repo: RepoKey) -> Iterator[Assignee]:
    pages = client.paginate(
        USER_ASSIGNEES_QUERY,
        {"owner": repo.owner, "repo": repo.repo},
        lambda page: page["repository"]["assignableUsers"]["pageInfo"],
    )
    for page in pages:
        for user in page["repository"]["assignableUsers"]["nodes"]:
            if user:
                yield Assignee(AssigneeType.USER, user["id"], user["login"], user.get("name"))


def _team_assignees(client: GitHubClient, owner: str) -> Iterator[Assignee]:
    pages = client.paginate(
        TEAM_ASSIGNEES_QUERY,
        {"owner": owner},
        lambda page: page["organization"]["teams"]["pageInfo"],
    )
    for page in pages:
        for team in page["organization"]["teams"]["nodes"]:
            if team:
                yield Assignee(AssigneeType.TEAM, team["id"], team["combinedSlug"], team.get("name"))


def filter_assignees(assignees: Iterable[Assignee],
                     ignore: Sequence[re.Pattern]) -> Iterator[Assignee]:
    """Drop assignees whose slug matches any ignore pattern."""
    for assignee in assignees:
        if any(p.search(assignee.slug) for p in ignore):
            _log.debug("assignees: ignoring %s", assignee.slug)
            continue
        yield assignee


def get_assignees(client: GitHubClient, repo: RepoKey,
                  ignore: Sequence[re.Pattern] = ()) -> Iterator[Assignee]:
    """Generate assignable users, then teams when the owner is an organization.

    Pages are fetched lazily as the generator is consumed.
    """
    org = is_organization(client, repo.owner)
    yield from filter_assignees(_user_assignees(client, repo), ignore)
    if org:
        yield from filter_assignees(_team_assignees(client, repo.owner), ignore)


def assignee_label(assignee: Assignee) -> str:
    if assignee.name:
        name = click.style(assignee.name, fg="yellow")
    else:
        name = click.style("No name", fg="bright_black")
    return f"{assignee.slug} {click.style('[', fg='white')}{name}{click.style(']', fg='white')}"


def select_assignees(selector: Selector, client: GitHubClient, repo: RepoKey,
                     ignore: Sequence[re.Pattern] = ()) -> list[Assignee]:
    """Prompt for reviewers among the repository's assignable users and teams."""
    options = (
        Option(id=a.id, label=assignee_label(a), value=a)
        for a in get_assignees(client, repo, ignore)
    )
    return [o.value for o in selector.select("Select Assignees:", options)]
