"""
Client for the GitHub REST API.

This client wraps the handful of pull request endpoints the workflow
needs. HTTP errors, timeouts and unparseable bodies are all reported as
:class:`GitHubError`, carrying the status code and the API's own error
message when one is available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GitHubError(Exception):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def split_repo(repo: str) -> Tuple[str, str]:
    """Split an ``owner/repo`` identifier.

    Raises
    ------
    GitHubError
        If the identifier is not of the form ``owner/repo``.
    """
    owner, sep, name = (repo or "").partition("/")
    if not sep or not owner or not name or "/" in name:
        raise GitHubError(f"Repository must be in the form owner/repo, got '{repo}'")
    return owner, name


def _error_message(response: requests.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if not isinstance(data, dict):
        return response.text
    message = data.get("message", "")
    details = [
        err.get("message", "")
        for err in data.get("errors", [])
        if isinstance(err, dict) and err.get("message")
    ]
    if details:
        message = f"{message}: {'; '.join(details)}" if message else "; ".join(details)
    return message or response.text


@dataclass
class GitHubClient:
    """Client for the pull request endpoints of the GitHub API.

    Parameters
    ----------
    token : str, optional
        Personal access or app token. Requests are anonymous without it.
    api_url : str, optional
        Base URL of the REST API. Defaults to ``https://api.github.com``.
    request_timeout : float, optional
        Timeout in seconds for each request. Defaults to 30 seconds.
    """

    token: Optional[str] = None
    api_url: str = "https://api.github.com"
    request_timeout: float = 30.0

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "pr-automation",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises
        ------
        GitHubError
            If the request fails, the status is not 2xx, or the body is
            not JSON.
        """
        url = f"{self.api_url.rstrip('/')}{path}"
        return self._decode(self._send(method, url, params=params, payload=payload))

    def _paginate(self, path: str, params: Dict[str, Any], key: Optional[str] = None) -> List[Dict[str, Any]]:
        """Collect the items of every page of a list endpoint.

        Pages are followed through the ``next`` relation of the ``Link``
        header. ``key`` names the list inside object responses such as
        the check runs endpoint.
        """
        items: List[Dict[str, Any]] = []
        url: Optional[str] = f"{self.api_url.rstrip('/')}{path}"
        while url:
            response = self._send("GET", url, params=params)
            data = self._decode(response)
            items.extend(data.get(key, []) if key else data)
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string.
            params = None
        return items

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        logger.debug("GitHub %s %s params=%s", method, url, params)
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to reach GitHub: %s", exc)
            raise GitHubError(str(exc)) from exc

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            logger.error("GitHub returned status %s for %s %s: %s", response.status_code, method, url, message)
            raise GitHubError(
                f"GitHub returned status {response.status_code}: {message}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise GitHubError("Failed to parse GitHub response", status_code=response.status_code) from exc

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------
    def create_pull_request(self, repo: str, title: str, body: str, head: str, base: str) -> Dict[str, Any]:
        owner, name = split_repo(repo)
        return self._request(
            "POST",
            f"/repos/{owner}/{name}/pulls",
            payload={"title": title, "body": body, "head": head, "base": base},
        )

    def get_pull_request(self, repo: str, number: int) -> Dict[str, Any]:
        owner, name = split_repo(repo)
        return self._request("GET", f"/repos/{owner}/{name}/pulls/{number}")

    def list_pull_requests(
        self,
        repo: str,
        head: Optional[str] = None,
        state: str = "open",
        sort: str = "created",
        direction: str = "desc",
        per_page: int = 30,
    ) -> List[Dict[str, Any]]:
        owner, name = split_repo(repo)
        params: Dict[str, Any] = {
            "state": state,
            "sort": sort,
            "direction": direction,
            "per_page": per_page,
        }
        if head:
            params["head"] = head
        return self._request("GET", f"/repos/{owner}/{name}/pulls", params=params)

    def find_latest_pull_request(self, repo: str, branch: str) -> Optional[int]:
        """Return the number of the newest open PR from ``branch``, if any."""
        owner, _ = split_repo(repo)
        prs = self.list_pull_requests(repo, head=f"{owner}:{branch}", per_page=1)
        return prs[0]["number"] if prs else None

    def list_pull_request_files(self, repo: str, number: int) -> List[Dict[str, Any]]:
        """Return every changed file of a PR (``filename``, ``changes``, ...)."""
        owner, name = split_repo(repo)
        return self._paginate(f"/repos/{owner}/{name}/pulls/{number}/files", params={"per_page": 100})

    def create_review(self, repo: str, number: int, body: str, event: str = "COMMENT") -> Dict[str, Any]:
        owner, name = split_repo(repo)
        return self._request(
            "POST",
            f"/repos/{owner}/{name}/pulls/{number}/reviews",
            payload={"body": body, "event": event},
        )

    def merge_pull_request(self, repo: str, number: int, merge_method: str = "merge") -> Dict[str, Any]:
        """Merge a PR. Returns ``sha``, ``merged`` and ``message``."""
        owner, name = split_repo(repo)
        return self._request(
            "PUT",
            f"/repos/{owner}/{name}/pulls/{number}/merge",
            payload={"merge_method": merge_method},
        )

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------
    def list_check_runs(self, repo: str, ref: str) -> List[Dict[str, Any]]:
        owner, name = split_repo(repo)
        return self._paginate(
            f"/repos/{owner}/{name}/commits/{ref}/check-runs",
            params={"per_page": 100},
            key="check_runs",
        )
