import logging
import os
import typing as t
from contextlib import contextmanager

import pytest

from ghref.errors import RemoteQueryError


@pytest.fixture(autouse=True)
def isolated_filesystem(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Isolate all referenced files to temp folder"""
    config_dir = os.path.join(tmp_path, "config")
    config_file = os.path.join(config_dir, "config.yaml")
    monkeypatch.setattr("ghref.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("ghref.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("ghref.commands.main.CONFIG_FILE", config_file)
    return {"user_config_dir": config_dir, "config_file": config_file}


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    for var in ("GITHUB_PAT", "GHREF_HOST", "GHREF_DEBUG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI stops the root logger from propagating, which hides it from caplog."""
    yield
    root = logging.getLogger("ghref")
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def assertion_msg():
    @contextmanager
    def assertion_msg(msg: str):
        try:
            yield
        except AssertionError as e:
            e.args = (e.args[0] + "\n" + msg,)
            raise

    return assertion_msg


class FakeRemoteQuery:
    """In-memory remote query, configured through its constructor.

    Missing entries raise a :class:`RemoteQueryError`, as a 404 would.
    Exceptions stored as values are raised instead of returned.
    """

    def __init__(
        self,
        *,
        pulls: t.Optional[t.Dict[t.Tuple[str, str, int], t.Any]] = None,
        releases: t.Optional[t.Dict[t.Tuple[str, str], t.Any]] = None,
        commits: t.Optional[t.Dict[t.Tuple[str, str, str], t.Any]] = None,
        contents: t.Optional[t.Dict[t.Tuple[str, str, str, str], t.Any]] = None,
    ) -> None:
        self.pulls = pulls or {}
        self.releases = releases or {}
        self.commits = commits or {}
        self.contents = contents or {}
        self.calls: t.List[t.Tuple[t.Any, ...]] = []

    def _get(self, data: t.Dict[t.Any, t.Any], key):
        self.calls.append(key)
        if key not in data:
            raise RemoteQueryError(f"{key} returned 404 Not Found", 404)
        value = data[key]
        if isinstance(value, Exception):
            raise value
        return value

    def get_pull_request(self, owner, repo, number):
        return self._get(self.pulls, (owner, repo, number))

    def list_releases(self, owner, repo):
        return self._get(self.releases, (owner, repo))

    def get_commit(self, owner, repo, ref):
        return self._get(self.commits, (owner, repo, ref))

    def get_contents(self, owner, repo, path, ref):
        return self._get(self.contents, (owner, repo, path, ref))


@pytest.fixture
def fake_query():
    return FakeRemoteQuery


def pull_response(ref: str, login: str):
    return {"number": 1, "head": {"ref": ref, "user": {"login": login}}}


@pytest.fixture
def make_pull():
    return pull_response
