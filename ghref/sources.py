import logging
import typing as t
import urllib.parse

import urllib3

from ghref.downloading import fetch_json


logger = logging.getLogger(__name__)

DEFAULT_HOST = "api.github.com"


class RemoteQuery(t.Protocol):
    """Queries against a repository API.

    Each method returns the decoded response as-is; callers must validate its shape.
    Failures in transport, or error statuses reported by the server, raise
    :class:`ghref.errors.RemoteQueryError`.
    """

    def get_pull_request(self, owner: str, repo: str, number: int) -> t.Any:
        """``{"head": {"ref": str, "user": {"login": str}}}``"""
        ...

    def list_releases(self, owner: str, repo: str) -> t.Any:
        """``[{"tag_name": str}, ...]``, most recent first."""
        ...

    def get_commit(self, owner: str, repo: str, ref: str) -> t.Any:
        """``{"sha": str}``"""
        ...

    def get_contents(self, owner: str, repo: str, path: str, ref: str) -> t.Any:
        """``{"sha": str}`` if `path` exists at `ref`."""
        ...


class GitHubAPI:
    """:class:`RemoteQuery` implementation for the GitHub REST API.

    Safe to share between threads, requests go through a single urllib3 pool.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        auth_token: t.Optional[str] = None,
        *,
        timeout: float = 10,
        pool_manager: t.Optional[urllib3.PoolManager] = None,
    ) -> None:
        self.host = host
        self.auth_token = auth_token
        self.timeout = timeout
        self.pool_manager = pool_manager or urllib3.PoolManager()

    def api_url(self, *path: t.Union[str, int]) -> str:
        segments = [urllib.parse.quote(str(segment), safe="") for segment in path]
        return f"https://{self.host}/" + "/".join(segments)

    def get(
        self,
        *path: t.Union[str, int],
        fields: t.Optional[t.MutableMapping[str, str]] = None,
    ) -> t.Any:
        url = self.api_url(*path)
        logger.debug(f"GET {url}")
        return fetch_json(
            url,
            fields=fields,
            auth_token=self.auth_token,
            pool_manager=self.pool_manager,
            timeout=self.timeout,
        )

    # GET /repos/:user/:repo/pulls/:number
    def get_pull_request(self, owner: str, repo: str, number: int):
        return self.get("repos", owner, repo, "pulls", number)

    # GET /repos/:user/:repo/releases
    def list_releases(self, owner: str, repo: str):
        return self.get("repos", owner, repo, "releases")

    # GET /repos/:user/:repo/commits/:ref
    def get_commit(self, owner: str, repo: str, ref: str):
        return self.get("repos", owner, repo, "commits", ref)

    # GET /repos/:user/:repo/contents/:path?ref=:ref
    def get_contents(self, owner: str, repo: str, path: str, ref: str):
        return self.get("repos", owner, repo, "contents", path, fields={"ref": ref})
