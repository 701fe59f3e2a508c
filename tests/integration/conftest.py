import os
import pathlib
from contextlib import contextmanager

import pytest
from click.testing import CliRunner

import ghref.commands.main
from ghref import downloading
from ghref.ghref import cli as ghref_cli


def pytest_collection_modifyitems(session, config, items):
    module = pathlib.Path(os.path.dirname(__file__))
    for item in items:
        if module == item.path.parent:
            item.add_marker(pytest.mark.integration_test)


def get_commands(cli, *, prefix=""):
    for cmd in cli.commands.values():
        if hasattr(cmd, "commands"):
            yield from get_commands(cmd, prefix=prefix + f"{cmd.name} ")
        else:
            cmd.qualified_name = prefix + cmd.name
            yield cmd


@pytest.fixture(
    scope="module",
    params=list(get_commands(ghref_cli)),
    ids=lambda cmd: cmd.qualified_name,
)
def command(request):
    yield request.param


@pytest.fixture(scope="function")
def runner():
    return CliRunner()


@pytest.fixture
def runner_result(runner, assertion_msg):
    @contextmanager
    def runner_result(*args, **kwargs):
        result = runner.invoke(*args, **kwargs)
        error_msg = "=" * 10 + "\nCOMMAND OUTPUT\n\n" + result.output + "=" * 10
        with assertion_msg(error_msg):
            yield result

    return runner_result


@pytest.fixture(autouse=True)
def forbid_requests(monkeypatch):
    def mocked_open_url(request, *args, **kwargs):
        pytest.fail(f"Attempted to make a forbidden request: {request}")

    monkeypatch.setattr(downloading, "open_url", mocked_open_url)


@pytest.fixture
def api(monkeypatch, fake_query):
    """Replace the API used by commands with a fake.

    The returned fake is shared by every command invocation in the test, and records
    the arguments the API was constructed with in `created`.
    """
    fake = fake_query()
    fake.created = []

    def make_api(host, auth_token=None, **kwargs):
        fake.created.append({"host": host, "auth_token": auth_token, **kwargs})
        return fake

    monkeypatch.setattr(ghref.commands.main, "GitHubAPI", make_api)
    return fake
