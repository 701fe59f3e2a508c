import logging
import typing as t
import urllib.parse
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from dataclasses import field

from ghref.config import Config
from ghref.config import get_env_auth_token
from ghref.config import get_env_host
from ghref.config import wrap_config_param
from ghref.errors import GHRefError
from ghref.errors import RemoteQueryError
from ghref.errors import UnknownUsernameError
from ghref.logging import ProgressBar
from ghref.refs import DEFAULT_REF
from ghref.refs import Direct
from ghref.refs import RefParam
from ghref.refs import to_variant
from ghref.repospec import parse_repo_spec
from ghref.repospec import RepoSpec
from ghref.resolve import resolve_ref
from ghref.resolve import ResolvedRef
from ghref.sources import DEFAULT_HOST
from ghref.sources import RemoteQuery


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitHubRemote:
    """A fully resolved GitHub repo, ready to be downloaded."""

    host: str
    username: str
    repo: str
    ref: str
    subdir: t.Optional[str] = None
    sha: t.Optional[str] = None
    auth_token: t.Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.username:
            raise ValueError("username must not be empty")
        if not self.ref:
            raise ValueError("ref must not be empty")

    def as_dict(self) -> t.Dict[str, t.Any]:
        """Descriptor fields, excluding the auth token and missing values."""
        fields = {
            "host": self.host,
            "username": self.username,
            "repo": self.repo,
            "subdir": self.subdir,
            "ref": self.ref,
            "sha": self.sha,
        }
        return {k: v for k, v in fields.items() if v is not None}

    def __str__(self):
        return f"{self.username}/{self.repo}@{self.ref}"


@dataclass(frozen=True)
class RemoteOptions:
    """Caller-supplied defaults, shared by every spec in a batch.

    Values embedded in a repo spec always take precedence over these.
    """

    username: t.Optional[str] = None
    ref: RefParam = None
    subdir: t.Optional[str] = None
    host: str = DEFAULT_HOST
    auth_token: t.Optional[str] = field(default=None, repr=False)
    sha: t.Optional[str] = None
    default_ref: str = DEFAULT_REF


@wrap_config_param
def remote_options(
    config: Config,
    *,
    username: t.Optional[str] = None,
    ref: RefParam = None,
    subdir: t.Optional[str] = None,
    host: t.Optional[str] = None,
    auth_token: t.Optional[str] = None,
    sha: t.Optional[str] = None,
) -> RemoteOptions:
    """Build :class:`RemoteOptions`, filling values that were not passed explicitly.

    Precedence: explicit arguments, then environment variables, then the config file.
    """
    return RemoteOptions(
        username=username or config.username,
        ref=ref,
        subdir=subdir,
        host=host or get_env_host() or config.host,
        auth_token=auth_token or get_env_auth_token() or config.auth_token,
        sha=sha,
        default_ref=config.default_ref,
    )


def assemble_remote(
    spec: RepoSpec, resolved: ResolvedRef, options: RemoteOptions
) -> GitHubRemote:
    """Merge a parsed spec, its resolved ref, and caller defaults.

    :raises UnknownUsernameError: if no username is available from any source.
    """
    username = resolved.owner or options.username
    if not username:
        raise UnknownUsernameError(spec.repo)
    if not spec.username:
        logger.warning(
            f"Username parameter is deprecated. Please use {username}/{spec.repo}"
        )

    return GitHubRemote(
        host=options.host,
        username=username,
        repo=spec.repo,
        ref=resolved.ref,
        subdir=spec.subdir or options.subdir,
        sha=options.sha,
        auth_token=options.auth_token,
    )


def github_remote(
    repo: str, options: RemoteOptions, query: RemoteQuery
) -> GitHubRemote:
    """Resolve a single repo spec.

    At most one request is made through `query`.
    """
    spec = parse_repo_spec(repo)
    variant = to_variant(spec, options.ref, options.default_ref)

    owner = spec.username or options.username
    if not owner and not isinstance(variant, Direct):
        raise UnknownUsernameError(spec.repo)

    resolved = resolve_ref(variant, owner, spec.repo, query)
    return assemble_remote(spec, resolved, options)


RemoteResult = t.Union[GitHubRemote, GHRefError]


def github_remotes(
    repos: t.Sequence[str],
    options: RemoteOptions,
    query: RemoteQuery,
    thread_count=1,
) -> t.List[RemoteResult]:
    """Resolve each repo spec independently.

    Errors for a spec are returned in its place rather than raised, so one failure
    does not prevent the rest of the batch from resolving. Results are in input order.
    """

    def _resolve(repo: str) -> RemoteResult:
        try:
            return github_remote(repo, options, query)
        except GHRefError as e:
            return e

    if thread_count <= 1 or len(repos) <= 1:
        return [_resolve(repo) for repo in ProgressBar(repos, desc="Resolving")]

    with ThreadPoolExecutor(
        max_workers=thread_count, thread_name_prefix="resolve_"
    ) as pool:
        futures = [pool.submit(_resolve, repo) for repo in repos]
        with ProgressBar(total=len(futures), desc="Resolving") as bar:
            results = []
            for future in futures:
                results.append(future.result())
                bar.update()
    return results


def remote_url(remote: GitHubRemote) -> str:
    """The zipball URL for a resolved remote."""
    src_root = f"https://{remote.host}/repos/{remote.username}/{remote.repo}"
    return f"{src_root}/zipball/{urllib.parse.quote(remote.ref, safe='')}"


def remote_metadata(
    remote: GitHubRemote,
    query: RemoteQuery,
    sha: t.Optional[str] = None,
    legacy_fields=True,
) -> t.Dict[str, t.Any]:
    """Metadata describing where a package was installed from.

    The sha is taken from the remote if it is already known, then from `sha`,
    and is otherwise looked up from the API.
    """
    sha = remote.sha or sha or fetch_commit_sha(remote, query)

    metadata = {
        "RemoteType": "github",
        "RemoteHost": remote.host,
        "RemoteRepo": remote.repo,
        "RemoteUsername": remote.username,
        "RemoteRef": remote.ref,
        "RemoteSha": sha,
        "RemoteSubdir": remote.subdir,
    }
    if legacy_fields:
        # Backward compatibility for older consumers
        metadata.update(
            {
                "GithubRepo": remote.repo,
                "GithubUsername": remote.username,
                "GithubRef": remote.ref,
                "GithubSHA1": sha,
                "GithubSubdir": remote.subdir,
            }
        )
    return {k: v for k, v in metadata.items() if v is not None}


def fetch_commit_sha(remote: GitHubRemote, query: RemoteQuery) -> t.Optional[str]:
    try:
        response = query.get_commit(remote.username, remote.repo, remote.ref)
    except RemoteQueryError as e:
        logger.warning(f"Could not determine commit for {remote}: {e}")
        return None
    sha = response.get("sha") if isinstance(response, dict) else None
    return sha if isinstance(sha, str) else None


def has_submodules(remote: GitHubRemote, query: RemoteQuery) -> bool:
    """Check if the repo has a `.gitmodules` file at the resolved ref.

    An error response cannot be told apart from a missing file, so any failure
    is treated as the repo having no submodules.
    """
    try:
        response = query.get_contents(
            remote.username, remote.repo, ".gitmodules", remote.ref
        )
    except RemoteQueryError as e:
        logger.debug(f"Submodule check for {remote} failed: {e}")
        return False

    # If the request was successful (=submodules exist), then it has a 'sha' field.
    return isinstance(response, dict) and response.get("sha") is not None
