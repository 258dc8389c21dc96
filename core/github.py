"""
core/github.py -- Outbound GitHub repository listing.

Backs GET /api/profile/github/{username}. The JSON GitHub returns is passed
through to the caller unmodified.

The client is constructed once in the app lifespan with the configured
credential and an HTTP session shared across requests for connection
pooling. Failures are raised, not swallowed: the route layer decides what
the caller sees.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from core.errors import NotFound

logger = logging.getLogger("devconnector.github")

REPOS_PER_PAGE = 5
REPOS_SORT = "created:asc"


class GitHubClient:
    """Thin wrapper over the GitHub REST API /users/{name}/repos endpoint."""

    def __init__(
        self,
        token: str = "",
        base_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
        timeout: int = 10,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        # Known public API, 3 hops is plenty.
        self._session.max_redirects = 3

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": "devconnector", "Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def list_repos(self, username: str) -> Any:
        """Return the newest-first-by-creation repo listing for username.

        Raises NotFound when GitHub has no such user, and
        requests.RequestException for every other upstream failure.
        """
        url = f"{self.base_url}/users/{quote(username, safe='')}/repos"
        params = {"per_page": REPOS_PER_PAGE, "sort": REPOS_SORT}
        try:
            resp = self._session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("GitHub request failed for %s: %s", username, e)
            raise
        if resp.status_code == 404:
            raise NotFound("No Github profile found")
        if not resp.ok:
            logger.warning("GitHub returned %s for %s", resp.status_code, username)
            resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._session.close()
