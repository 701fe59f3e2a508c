"""Reference kinds a repo spec can ask for.

A spec names exactly one of:

* :class:`Direct` - a branch, tag or commit, used as-is.
* :class:`PullRequest` - a pull request, resolved to its head branch.
* :class:`LatestRelease` - resolved to the tag of the most recent release.

Resolution is dispatched on the variant in :func:`ghref.resolve.resolve_ref`.
"""
import typing as t
from dataclasses import dataclass

from ghref.repospec import RELEASE
from ghref.repospec import RepoSpec


DEFAULT_REF = "master"


@dataclass(frozen=True)
class Direct:
    value: str

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class PullRequest:
    number: int

    def __str__(self):
        return f"#{self.number}"


@dataclass(frozen=True)
class LatestRelease:
    def __str__(self):
        return RELEASE


ReferenceVariant = t.Union[Direct, PullRequest, LatestRelease]
RefParam = t.Union[str, ReferenceVariant, None]


def github_pull(pull: int) -> PullRequest:
    """Request the head of pull request `pull`, for use as a fallback `ref`."""
    return PullRequest(int(pull))


def github_release() -> LatestRelease:
    """Request the latest release, for use as a fallback `ref`."""
    return LatestRelease()


def parse_ref_param(ref: str) -> ReferenceVariant:
    """Convert the string form of a fallback ref (see :data:`ghref.spec.REFSPEC`).

    :raises ValueError: if `ref` is empty or an unknown special reference.
    """
    if not ref:
        raise ValueError("Reference must not be empty.")
    if ref == RELEASE:
        return LatestRelease()
    if ref.startswith("*"):
        raise ValueError(f"Unknown special reference '{ref}'.")
    if ref.startswith("#") and ref[1:].isdigit():
        return PullRequest(int(ref[1:]))
    return Direct(ref)


def to_variant(
    spec: RepoSpec, fallback: RefParam = None, default_ref: str = DEFAULT_REF
) -> ReferenceVariant:
    """Select the reference variant for `spec`.

    A reference embedded in the spec takes precedence over `fallback`, which in turn
    takes precedence over `default_ref`.
    """
    if spec.pull is not None:
        return PullRequest(spec.pull)
    if spec.release is not None:
        return LatestRelease()
    if spec.ref is not None:
        return Direct(spec.ref)

    if fallback is None:
        return Direct(default_ref)
    if isinstance(fallback, str):
        return parse_ref_param(fallback)
    return fallback
