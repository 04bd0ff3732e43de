"""Async GitHub REST client for pull requests, statuses and check runs."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from prwatch.config import Config

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github+json"


class GitHubError(Exception):
    """Raised when a GitHub request fails in transport, status or decoding."""

    def __init__(
        self, url: str, reason: str = "", status_code: int | None = None
    ) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            message = f"GitHub request failed ({status_code}): {url}"
        else:
            message = f"GitHub request failed: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


def build_headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": ACCEPT_HEADER}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def check_records(
    url: str,
    records: list[Any],
    objects: tuple[str, ...] = (),
    object_lists: tuple[str, ...] = (),
) -> list[dict[str, Any]]:
    """Raise ``GitHubError`` unless every record is an object.

    Fields named in ``objects`` must be objects or null; fields named in
    ``object_lists`` must be lists of objects or null.
    """
    for record in records:
        if not isinstance(record, dict):
            raise GitHubError(url, "malformed record")
        for key in objects:
            value = record.get(key)
            if value is not None and not isinstance(value, dict):
                raise GitHubError(url, f"malformed record field '{key}'")
        for key in object_lists:
            value = record.get(key)
            if value is not None and (
                not isinstance(value, list)
                or not all(isinstance(item, dict) for item in value)
            ):
                raise GitHubError(url, f"malformed record field '{key}'")
    return records


class GitHubClient:
    """Thin wrapper around ``httpx.AsyncClient`` that returns decoded JSON.

    Every failure mode of a single request (connection error, timeout,
    non-2xx status, body that is not JSON) is raised as ``GitHubError``.
    """

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers=build_headers(config.token),
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, url: str) -> Any:
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise GitHubError(url, "timed out") from e
        except httpx.HTTPError as e:
            raise GitHubError(url, str(e) or type(e).__name__) from e

        if response.is_error:
            raise GitHubError(url, response.reason_phrase, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(url, "invalid JSON", response.status_code) from e

    async def list_pulls(self, repo: str) -> list[dict[str, Any]]:
        """List the first page of pull requests for ``owner/name``."""
        url = f"/repos/{repo}/pulls"
        data = await self.get_json(url)
        if not isinstance(data, list):
            raise GitHubError(url, "expected a list")
        return check_records(
            url, data, objects=("user", "head"), object_lists=("labels",)
        )

    async def get_statuses(self, statuses_url: str) -> list[dict[str, Any]]:
        data = await self.get_json(statuses_url)
        if not isinstance(data, list):
            raise GitHubError(statuses_url, "expected a list")
        return check_records(statuses_url, data)

    async def get_check_runs(self, repo: str, sha: str) -> list[dict[str, Any]]:
        url = f"/repos/{repo}/commits/{sha}/check-runs"
        data = await self.get_json(url)
        if not isinstance(data, dict) or not isinstance(
            data.get("check_runs", []), list
        ):
            raise GitHubError(url, "expected an object with check_runs")
        return check_records(url, data.get("check_runs", []), objects=("app",))
