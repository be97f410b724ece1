from __future__ import annotations

import re

from github import Github

_PR_NUMBER_RE = re.compile(r"/(\d+)/?$")


def get_client(token: str) -> Github:
    return Github(token)


def get_repo(repo_name: str, token: str):
    return get_client(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_branch_name(repo, pr_number: int) -> str:
    """Return the head branch of a pull request."""
    return get_pull(repo, pr_number).head.ref


def get_authenticated_login(token: str) -> str:
    return get_client(token).get_user().login


def get_issue(repo, pr_number: int):
    return repo.get_issue(pr_number)


def parse_pr_number(pr_url: str | None) -> int | None:
    """Return the pull request number at the end of an API url, or None."""
    match = _PR_NUMBER_RE.search(pr_url or "")
    return int(match.group(1)) if match else None
