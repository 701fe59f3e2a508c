import json
import typing as t

import pytest
from urllib3.exceptions import HTTPError
from urllib3.exceptions import ReadTimeoutError

from ghref import downloading
from ghref.errors import RemoteQueryError
from ghref.errors import RepositoryNotFoundError
from ghref.remote import github_remotes
from ghref.remote import GitHubRemote
from ghref.remote import RemoteOptions
from ghref.sources import DEFAULT_HOST
from ghref.sources import GitHubAPI


class FakeResponse:
    def __init__(self, body: t.Union[str, bytes], status=200) -> None:
        self.body = body.encode() if isinstance(body, str) else body
        self.status = status
        self.headers: t.Dict[str, str] = {}
        self.url = ""

    def read(self, length=None) -> bytes:
        return self.body


@pytest.fixture
def requests(monkeypatch):
    """Record requests made with `open_url`, responding with the queued responses."""
    made = []
    responses: t.List[t.Any] = []

    def fake_open_url(url, *, headers=None, fields=None, **kwargs):
        made.append({"url": url, "headers": headers, "fields": fields})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(downloading, "open_url", fake_open_url)
    return made, responses


def test_pull_request_path(requests):
    made, responses = requests
    data = {"head": {"ref": "feature", "user": {"login": "forker"}}}
    responses.append(FakeResponse(json.dumps(data)))

    api = GitHubAPI()
    assert api.get_pull_request("user", "repo", 142) == data
    assert made[0]["url"] == "https://api.github.com/repos/user/repo/pulls/142"


def test_releases_path_enterprise_host(requests):
    made, responses = requests
    responses.append(FakeResponse("[]"))

    api = GitHubAPI("github.example.com/api/v3")
    assert api.list_releases("user", "repo") == []
    assert made[0]["url"] == "https://github.example.com/api/v3/repos/user/repo/releases"


def test_commit_path_quotes_ref(requests):
    made, responses = requests
    responses.append(FakeResponse('{"sha": "abc"}'))

    GitHubAPI().get_commit("user", "repo", "feature/x")
    assert made[0]["url"] == "https://api.github.com/repos/user/repo/commits/feature%2Fx"


def test_contents_ref_field(requests):
    made, responses = requests
    responses.append(FakeResponse('{"sha": "abc"}'))

    GitHubAPI().get_contents("user", "repo", ".gitmodules", "main")
    assert made[0]["url"] == "https://api.github.com/repos/user/repo/contents/.gitmodules"
    assert made[0]["fields"] == {"ref": "main"}


def test_auth_token_header(requests):
    made, responses = requests
    responses += [FakeResponse("[]"), FakeResponse("[]")]

    GitHubAPI(auth_token="secret").list_releases("user", "repo")
    assert made[0]["headers"]["Authorization"] == "token secret"

    GitHubAPI().list_releases("user", "repo")
    assert "Authorization" not in made[1]["headers"]


@pytest.mark.parametrize(
    ("response", "match"),
    [
        pytest.param(
            FakeResponse('{"message": "Not Found"}', status=404),
            "404 Not Found",
            id="error status",
        ),
        pytest.param(FakeResponse("<html>oops</html>"), "Invalid response", id="not json"),
        pytest.param(HTTPError("connection refused"), "failed", id="transport"),
    ],
)
def test_fetch_json_errors(requests, response, match):
    _, responses = requests
    responses.append(response)

    with pytest.raises(RemoteQueryError, match=match):
        GitHubAPI().list_releases("user", "repo")


def test_fetch_json_error_status(requests):
    _, responses = requests
    responses.append(FakeResponse('{"message": "Bad credentials"}', status=401))

    with pytest.raises(RemoteQueryError) as exc_info:
        GitHubAPI().list_releases("user", "repo")
    assert exc_info.value.status == 401


@pytest.mark.parametrize(
    ("api"),
    [
        pytest.param(GitHubAPI(timeout=0), id="zero timeout"),
        pytest.param(GitHubAPI("api.github.com:abc"), id="invalid port"),
    ],
)
def test_fetch_json_invalid_request(api):
    with pytest.raises(RemoteQueryError, match="failed"):
        api.list_releases("user", "repo")


def test_github_remotes_transport_errors():
    results = github_remotes(
        ["user/a@v1", "user/b@*release"], RemoteOptions(), GitHubAPI(timeout=0)
    )
    assert results[0] == GitHubRemote(DEFAULT_HOST, "user", "a", "v1")
    assert isinstance(results[1], RepositoryNotFoundError)


class TimeoutPool:
    def __init__(self) -> None:
        self.timeouts: t.List[t.Any] = []

    def request(self, method, url, **kwargs):
        self.timeouts.append(kwargs["timeout"])
        raise ReadTimeoutError(None, url, "Read timed out.")


def test_read_timeout_not_retried():
    pool = TimeoutPool()
    api = GitHubAPI(timeout=2.5, pool_manager=pool)  # type: ignore

    with pytest.raises(RemoteQueryError, match="Read timed out"):
        api.list_releases("user", "repo")
    assert len(pool.timeouts) == 1
    assert pool.timeouts[0].read_timeout == 2.5
