import re
import typing as t
from dataclasses import dataclass

from ghref.errors import InvalidSpecError


RELEASE = "*release"
"""Sentinel value of :attr:`RepoSpec.release`, requesting the latest release."""

_USERNAME_RX = r"(?:(?P<username>[^/]+)/)?"
_REPO_RX = r"(?P<repo>[^/@#]+)"
_SUBDIR_RX = r"(?:/(?P<subdir>[^@#]*[^@#/])/?)?"
_REF_RX = r"(?:@(?P<ref>[^*].*))"
_PULL_RX = r"(?:#(?P<pull>[0-9]+))"
_RELEASE_RX = r"(?:@(?P<release>[*]release))"

_REPOSPEC_PATTERN = re.compile(
    f"{_USERNAME_RX}{_REPO_RX}{_SUBDIR_RX}(?:{_REF_RX}|{_PULL_RX}|{_RELEASE_RX})?",
    flags=re.DOTALL,
)


@dataclass(frozen=True)
class RepoSpec:
    """The fields of a parsed repo spec.

    At most one of `ref`, `pull` and `release` is set. If none are, the reference is
    unset and falls back to a default branch when resolved.
    """

    repo: str
    username: t.Optional[str] = None
    subdir: t.Optional[str] = None
    ref: t.Optional[str] = None
    pull: t.Optional[int] = None
    release: t.Optional[str] = None

    def __post_init__(self):
        if not self.repo or any(c in self.repo for c in "/@#"):
            raise ValueError(f"Invalid repo: '{self.repo}'")
        if self.username is not None and (not self.username or "/" in self.username):
            raise ValueError(f"Invalid username: '{self.username}'")
        if self.subdir is not None:
            if self.username is None:
                # 'repo/subdir' would be read back as 'username/repo'
                raise ValueError("subdir requires a username")
            if (
                not self.subdir
                or self.subdir.endswith("/")
                or any(c in self.subdir for c in "@#")
            ):
                raise ValueError(f"Invalid subdir: '{self.subdir}'")
        if self.ref is not None and (not self.ref or self.ref.startswith("*")):
            raise ValueError(f"Invalid ref: '{self.ref}'")
        if self.pull is not None and self.pull < 0:
            raise ValueError(f"Invalid pull request number: '{self.pull}'")
        if sum(v is not None for v in (self.ref, self.pull, self.release)) > 1:
            raise ValueError("only one of 'ref', 'pull' or 'release' can be set")
        if self.release is not None and self.release != RELEASE:
            raise ValueError(f"release must be '{RELEASE}'")

    def as_dict(self) -> t.Dict[str, t.Any]:
        """Fields present in the spec, in grammar order."""
        fields = {
            "username": self.username,
            "repo": self.repo,
            "subdir": self.subdir,
            "ref": self.ref,
            "pull": self.pull,
            "release": self.release,
        }
        return {k: v for k, v in fields.items() if v is not None}

    def __str__(self):
        return format_repo_spec(self)


def parse_repo_spec(spec: str) -> RepoSpec:
    """Parse a concise GitHub repo spec.

    The format is ``[username/]repo[/subdir][#pull|@ref|@*release]``.

    :raises InvalidSpecError: if the whole of `spec` does not match.
    """
    match = _REPOSPEC_PATTERN.fullmatch(spec)
    if not match:
        raise InvalidSpecError(spec)

    # empty captures are treated the same as missing ones
    params = {k: v for k, v in match.groupdict().items() if v}
    if "pull" in params:
        params["pull"] = int(params["pull"])
    try:
        return RepoSpec(**params)
    except ValueError as e:
        raise InvalidSpecError(spec) from e


def format_repo_spec(spec: RepoSpec) -> str:
    output = spec.repo
    if spec.username:
        output = f"{spec.username}/{output}"
    if spec.subdir:
        output += f"/{spec.subdir}"
    if spec.ref is not None:
        output += f"@{spec.ref}"
    elif spec.pull is not None:
        output += f"#{spec.pull}"
    elif spec.release is not None:
        output += f"@{spec.release}"
    return output
