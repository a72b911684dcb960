"""Pull request queries and mutations."""

import logging
from dataclasses import dataclass
from typing import Optional

from pt_core.git_ops import RepoKey
from pt_core.graphql import GitHubClient, GraphQLError

_log = logging.getLogger("pt.pulls")

REPO_QUERY = """
query repo($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    id
    defaultBranchRef {
      name
    }
  }
}
"""

VIEWER_QUERY = """
query viewer {
  viewer {
    login
  }
}
"""

MY_PULLS_QUERY = """
query myPullRequests($query: String!, $cursor: String) {
  search(query: $query, first: 100, type: ISSUE, after: $cursor) {
    edges {
      node {
        ... on PullRequest {
          id
          number
          title
          headRefName
          url
        }
      }
    }
    pageInfo {
      endCursor
      hasNextPage
    }
  }
}
"""

CREATE_PULL_MUTATION = """
mutation createPull($input: CreatePullRequestInput!) {
  createPullRequest(input: $input) {
    pullRequest {
      id
      number
      url
    }
  }
}
"""

REQUEST_REVIEW_MUTATION = """
mutation requestReview($input: RequestReviewsInput!) {
  requestReviews(input: $input) {
    clientMutationId
  }
}
"""

ENABLE_AUTO_MERGE_MUTATION = """
mutation enableAutoMerge($input: EnablePullRequestAutoMergeInput!) {
  enablePullRequestAutoMerge(input: $input) {
    clientMutationId
  }
}
"""


@dataclass(frozen=True)
class RepoInfo:
    repo_id: str
    default_branch: str


@dataclass
class PullRequest:
    id: str
    number: int
    head_ref_name: str = ""
    title: str = ""
    body: str = ""
    url: str = ""

    @classmethod
    def from_node(cls, node: dict) -> "PullRequest":
        return cls(
            id=node["id"],
            number=node.get("number", 0),
            head_ref_name=node.get("headRefName", ""),
            title=node.get("title", ""),
            body=node.get("body", ""),
            url=node.get("url", ""),
        )


def get_repo_info(client: GitHubClient, repo: RepoKey) -> Optional[RepoInfo]:
    """Repository node ID and default branch, or None if GitHub has no such repo."""
    try:
        data = client.request(REPO_QUERY, {"owner": repo.owner, "repo": repo.repo})
    except GraphQLError as e:
        # Unknown repositories come back as a NOT_FOUND error, not a null node
        _log.info("repo lookup for %s failed: %s", repo.full_name, e)
        return None
    repository = data.get("repository")
    if not repository:
        return None
    default_ref = repository.get("defaultBranchRef") or {}
    return RepoInfo(repo_id=repository["id"], default_branch=default_ref.get("name") or "main")


def get_viewer_login(client: GitHubClient) -> str:
    return client.request(VIEWER_QUERY)["viewer"]["login"]


def get_pulls(client: GitHubClient, repo: RepoKey) -> list[PullRequest]:
    """Get the viewer's open pull requests for this repo."""
    author = get_viewer_login(client)
    pages = client.paginate(
        MY_PULLS_QUERY,
        {"query": f"is:pr is:open author:{author} repo:{repo.full_name}"},
        lambda page: page["search"]["pageInfo"],
    )
    prs = []
    for page in pages:
        for edge in page["search"]["edges"]:
            node = edge.get("node") or {}
            # search(type: ISSUE) may return issues, which have no fragment fields
            if "id" in node:
                prs.append(PullRequest.from_node(node))
    return prs


def find_pull_for_branch(prs: list[PullRequest], branch: str) -> Optional[PullRequest]:
    return next((pr for pr in prs if pr.head_ref_name == branch), None)


def create_pull(client: GitHubClient, *, repository_id: str, base_ref_name: str,
                head_ref_name: str, title: str, body: str, draft: bool = False) -> PullRequest:
    """Create a pull request."""
    data = client.request(CREATE_PULL_MUTATION, {"input": {
        "repositoryId": repository_id,
        "baseRefName": base_ref_name,
        "headRefName": head_ref_name,
        "title": title,
        "body": body,
        "draft": draft,
    }})
    node = data["createPullRequest"]["pullRequest"]
    return PullRequest(
        id=node["id"],
        number=node.get("number", 0),
        head_ref_name=head_ref_name,
        title=title,
        body=body,
        url=node.get("url", ""),
    )


def request_review(client: GitHubClient, pull_request_id: str,
                   user_ids: list[str], team_ids: list[str]) -> None:
    """Assign reviewers to an existing pull request."""
    client.request(REQUEST_REVIEW_MUTATION, {"input": {
        "pullRequestId": pull_request_id,
        "userIds": user_ids,
        "teamIds": team_ids,
    }})


def enable_auto_merge(client: GitHubClient, pull_request_id: str,
                      merge_method: str = "SQUASH") -> None:
    client.request(ENABLE_AUTO_MERGE_MUTATION, {"input": {
        "pullRequestId": pull_request_id,
        "mergeMethod": merge_method,
    }})
