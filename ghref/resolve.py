import logging
import typing as t
from dataclasses import dataclass

from ghref.errors import NoReleasesFoundError
from ghref.errors import PullRequestNotFoundError
from ghref.errors import RemoteQueryError
from ghref.errors import RepositoryNotFoundError
from ghref.refs import Direct
from ghref.refs import LatestRelease
from ghref.refs import PullRequest
from ghref.refs import ReferenceVariant
from ghref.sources import RemoteQuery


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRef:
    ref: str
    owner: t.Optional[str]


def resolve_ref(
    variant: ReferenceVariant,
    owner: t.Optional[str],
    repo: str,
    query: RemoteQuery,
) -> ResolvedRef:
    """Turn a reference variant into a concrete git ref.

    :class:`Direct` refs are returned unchanged without querying the remote.
    Pull requests and releases are resolved with exactly one query each.

    A pull request may be opened from a fork, in which case the returned owner
    is the owner of the fork.
    """
    if isinstance(variant, Direct):
        return ResolvedRef(variant.value, owner)
    if owner is None:
        raise ValueError(f"Cannot resolve {variant} without an owner for '{repo}'")
    if isinstance(variant, PullRequest):
        return resolve_pull(variant, owner, repo, query)
    if isinstance(variant, LatestRelease):
        return resolve_release(owner, repo, query)
    raise TypeError(f"Unknown reference type: {type(variant).__name__}")


def resolve_pull(
    pull: PullRequest, owner: str, repo: str, query: RemoteQuery
) -> ResolvedRef:
    try:
        response = query.get_pull_request(owner, repo, pull.number)
    except RemoteQueryError as e:
        logger.debug(f"Pull request query failed: {e}")
        raise PullRequestNotFoundError(owner, repo, pull.number) from e

    # error pages can look like successful responses
    try:
        head = response["head"]
        head_ref = head["ref"]
        head_owner = head["user"]["login"]
    except (KeyError, TypeError):
        head_ref = head_owner = None
    if not (isinstance(head_ref, str) and head_ref):
        raise PullRequestNotFoundError(owner, repo, pull.number)
    if not (isinstance(head_owner, str) and head_owner):
        raise PullRequestNotFoundError(owner, repo, pull.number)

    logger.debug(f"Resolved {owner}/{repo}#{pull.number} to {head_owner}@{head_ref}")
    return ResolvedRef(head_ref, head_owner)


def resolve_release(owner: str, repo: str, query: RemoteQuery) -> ResolvedRef:
    try:
        response = query.list_releases(owner, repo)
    except RemoteQueryError as e:
        logger.debug(f"Release query failed: {e}")
        raise RepositoryNotFoundError(owner, repo) from e

    if isinstance(response, dict) and "message" in response:
        raise RepositoryNotFoundError(owner, repo)
    if not isinstance(response, list):
        raise RepositoryNotFoundError(owner, repo)
    if len(response) == 0:
        raise NoReleasesFoundError(owner, repo)

    # releases are listed most recent first
    latest = response[0]
    tag_name = latest.get("tag_name") if isinstance(latest, dict) else None
    if not (isinstance(tag_name, str) and tag_name):
        raise RepositoryNotFoundError(owner, repo)

    logger.debug(f"Latest release of {owner}/{repo} is {tag_name}")
    return ResolvedRef(tag_name, owner)
