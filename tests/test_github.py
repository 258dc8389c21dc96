"""Unit tests for core/github.py with a mocked requests session."""

from unittest.mock import MagicMock

import pytest
import requests

from core.errors import NotFound
from core.github import GitHubClient


def _response(status: int, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    resp.json.return_value = payload
    if not resp.ok:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestListRepos:
    def test_request_shape(self, session):
        session.get.return_value = _response(200, [{"name": "repo"}])
        client = GitHubClient(token="ghp_test", base_url="https://api.github.test/", session=session)

        assert client.list_repos("octo cat") == [{"name": "repo"}]

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.github.test/users/octo%20cat/repos"
        assert kwargs["params"] == {"per_page": 5, "sort": "created:asc"}
        assert kwargs["headers"]["Authorization"] == "token ghp_test"
        assert kwargs["headers"]["User-Agent"] == "devconnector"
        assert kwargs["timeout"] == 10

    def test_no_token_sends_no_authorization(self, session):
        session.get.return_value = _response(200, [])
        GitHubClient(session=session).list_repos("octocat")
        assert "Authorization" not in session.get.call_args.kwargs["headers"]

    def test_unknown_user_is_not_found(self, session):
        session.get.return_value = _response(404, {"message": "Not Found"})
        with pytest.raises(NotFound) as exc_info:
            GitHubClient(session=session).list_repos("ghost")
        assert exc_info.value.msg == "No Github profile found"

    def test_other_upstream_status_raises(self, session):
        session.get.return_value = _response(503)
        with pytest.raises(requests.HTTPError):
            GitHubClient(session=session).list_repos("octocat")

    def test_network_error_propagates(self, session):
        session.get.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(requests.ConnectionError):
            GitHubClient(session=session).list_repos("octocat")

    def test_redirects_capped(self, session):
        GitHubClient(session=session)
        assert session.max_redirects == 3
