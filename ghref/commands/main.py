import logging
import typing as t

import click
import yaml
from click import echo

import ghref.clickExt as clickExt
from ghref.config import CONFIG_FILE
from ghref.config import Env
from ghref.config import UserInfo
from ghref.errors import GHRefError
from ghref.formatting import format_columns
from ghref.formatting import format_secret
from ghref.ghref import cli
from ghref.logging import timed_progress
from ghref.remote import github_remotes
from ghref.remote import GitHubRemote
from ghref.remote import has_submodules
from ghref.remote import remote_metadata
from ghref.remote import remote_options
from ghref.remote import remote_url
from ghref.remote import RemoteOptions
from ghref.repospec import parse_repo_spec
from ghref.sources import GitHubAPI
from ghref.spec import REFSPEC
from ghref.spec import REPOSPEC


logger = logging.getLogger(__name__)


def repos_argument():
    return click.argument("repos", nargs=-1, required=True, metavar=REPOSPEC + "...")


def remote_params(f):
    """Options shared by commands that resolve repo specs."""
    for decorator in reversed(
        [
            click.option(
                "--username",
                help="Username for repo specs that do not include one (deprecated).",
            ),
            click.option(
                "--ref",
                type=clickExt.RefSpec(),
                metavar=REFSPEC,
                help="Reference to use for repo specs that do not include one.",
            ),
            click.option(
                "--subdir",
                help="Subdirectory to use for repo specs that do not include one.",
            ),
            click.option("--host", help="GitHub API host to use."),
            click.option(
                "--auth-token",
                metavar="TOKEN",
                help="Personal access token, for private repos. Defaults to $GITHUB_PAT.",
            ),
        ]
    ):
        f = decorator(f)
    return f


def make_query(ctx: click.Context, options: RemoteOptions):
    config = ctx.ensure_object(UserInfo).config
    return GitHubAPI(
        options.host, options.auth_token, timeout=config.downloading.timeout
    )


def resolve_all(
    ctx: click.Context, repos: t.Sequence[str], options: RemoteOptions, query
) -> t.List[t.Tuple[str, GitHubRemote]]:
    """Resolve `repos`, handling errors according to `--keep-going`."""
    config = ctx.ensure_object(UserInfo).config
    env = ctx.find_object(Env) or Env()

    with timed_progress(
        f"Resolved {len(repos)} repo(s) in {{time:.2f}} seconds.", logging.DEBUG
    ):
        results = github_remotes(
            repos, options, query, thread_count=config.downloading.thread_count
        )

    resolved = []
    failed = 0
    for repo, result in zip(repos, results):
        if isinstance(result, GHRefError):
            if not env.ignore_errors:
                raise result
            logger.error(result.format_message())
            failed += 1
            continue
        resolved.append((repo, result))

    if failed:
        # exit status is set once the successful results are output
        ctx.meta["ghref.failed"] = failed
    return resolved


def exit_on_failures(ctx: click.Context):
    failed = ctx.meta.get("ghref.failed", 0)
    if failed:
        logger.error(f"{failed} repo(s) could not be resolved.")
        ctx.exit(1)


@cli.command(no_args_is_help=True)
@repos_argument()
def parse(repos: t.Tuple[str, ...]):
    """Parse repo specs without resolving them.

    Prints the fields found in each repo spec."""
    docs = [{repo: parse_repo_spec(repo).as_dict()} for repo in repos]
    echo(yaml.safe_dump_all(docs, sort_keys=False), nl=False)


@cli.command(no_args_is_help=True)
@repos_argument()
@remote_params
@click.option("--sha", help="Known commit sha of the resolved ref.")
@click.option(
    "--metadata",
    "show_metadata",
    is_flag=True,
    help="Print install metadata instead of the resolved fields.",
)
@click.option(
    "--check-submodules",
    is_flag=True,
    help="Warn if a repo uses git submodules.",
)
@clickExt.keep_going_option()
@click.pass_context
def resolve(
    ctx: click.Context,
    repos: t.Tuple[str, ...],
    username: t.Optional[str],
    ref,
    subdir: t.Optional[str],
    host: t.Optional[str],
    auth_token: t.Optional[str],
    sha: t.Optional[str],
    show_metadata: bool,
    check_submodules: bool,
):
    """Resolve repo specs to a concrete ref.

    Pull requests are resolved to their head branch, and `*release` to the
    tag of the latest release."""
    options = remote_options(
        ctx,
        username=username,
        ref=ref,
        subdir=subdir,
        host=host,
        auth_token=auth_token,
        sha=sha,
    )
    query = make_query(ctx, options)
    config = ctx.ensure_object(UserInfo).config

    docs = []
    for repo, remote in resolve_all(ctx, repos, options, query):
        if check_submodules and has_submodules(remote, query):
            logger.warning(
                f"GitHub repo {remote} contains submodules, may not function as expected!"
            )
        if show_metadata:
            data = remote_metadata(
                remote, query, legacy_fields=config.metadata.legacy_fields
            )
        else:
            data = {**remote.as_dict(), "url": remote_url(remote)}
        docs.append({repo: data})

    if docs:
        echo(yaml.safe_dump_all(docs, sort_keys=False), nl=False)
    exit_on_failures(ctx)


@cli.command(no_args_is_help=True)
@repos_argument()
@remote_params
@clickExt.keep_going_option()
@click.pass_context
def url(
    ctx: click.Context,
    repos: t.Tuple[str, ...],
    username: t.Optional[str],
    ref,
    subdir: t.Optional[str],
    host: t.Optional[str],
    auth_token: t.Optional[str],
):
    """Print the archive download URL for repo specs."""
    options = remote_options(
        ctx,
        username=username,
        ref=ref,
        subdir=subdir,
        host=host,
        auth_token=auth_token,
    )
    query = make_query(ctx, options)

    urls = [
        (repo, remote_url(remote))
        for repo, remote in resolve_all(ctx, repos, options, query)
    ]
    if urls:
        echo(format_columns(urls))
    exit_on_failures(ctx)


@cli.command(name="config")
@click.pass_context
def show_config(ctx: click.Context):
    """Show the effective configuration.

    Includes values from environment variables."""
    options = remote_options(ctx)
    config = ctx.ensure_object(UserInfo).config
    echo(
        format_columns(
            {
                "config file": CONFIG_FILE,
                "host": options.host,
                "username": options.username or "",
                "default ref": options.default_ref,
                "auth token": format_secret(options.auth_token) or "",
                "thread count": config.downloading.thread_count,
                "timeout": config.downloading.timeout,
            }
        )
    )
