import typing as t

import click


class EmptyFileError(Exception):
    pass


class ExceptionCount(Exception):
    def __init__(self, count: int):
        self.count = count
        super().__init__()


class GHRefError(click.ClickException):
    """Base class for errors raised while resolving a repo spec."""


class InvalidSpecError(GHRefError):
    def __init__(self, spec: str) -> None:
        self.spec = spec
        super().__init__(f"Invalid git repo: {spec}")


class UnknownUsernameError(GHRefError):
    def __init__(self, repo: str) -> None:
        self.repo = repo
        super().__init__(
            f"Unknown username for repo '{repo}'.\n"
            f"Include the username in the repo spec, e.g. 'username/{repo}'."
        )


class RemoteDataError(GHRefError):
    """The remote API did not return usable data for a repo."""

    def __init__(self, message: str, username: str, repo: str) -> None:
        self.username = username
        self.repo = repo
        super().__init__(message)


class PullRequestNotFoundError(RemoteDataError):
    def __init__(self, username: str, repo: str, pull: int) -> None:
        self.pull = pull
        super().__init__(
            f"Cannot find GitHub pull request {username}/{repo}#{pull}",
            username,
            repo,
        )


class RepositoryNotFoundError(RemoteDataError):
    def __init__(self, username: str, repo: str) -> None:
        super().__init__(f"Cannot find repo {username}/{repo}.", username, repo)


class NoReleasesFoundError(RemoteDataError):
    def __init__(self, username: str, repo: str) -> None:
        super().__init__(
            f"No releases found for repo {username}/{repo}.", username, repo
        )


class RemoteQueryError(Exception):
    """Transport or protocol failure from a remote query.

    Never surfaced directly to callers of the resolver, which translate it into
    a :class:`RemoteDataError`.
    """

    def __init__(self, message: str, status: t.Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)
