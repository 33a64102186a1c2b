"""GitHub REST API client for labels and repository contents.

This module provides the GitHubClient class which handles:
- Authenticated requests with the GitHub v3 media type
- Mapping error responses to typed exceptions (rate limit, auth, other)
- Link-header pagination
- Reading a file from a repository, listing and replacing PR labels

Failed requests are raised to the caller, never retried.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from prlabeler import __version__
from prlabeler.github.auth import get_github_token, mask_token

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"


class GitHubAPIError(Exception):
    """Raised for GitHub API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        """Initialize GitHub API error.

        Args:
            message: Error description.
            status_code: HTTP status code.
            response_body: Response JSON body if available.
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body or {}

    @property
    def is_not_found(self) -> bool:
        """Check if the error is a 404."""
        return self.status_code == 404


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        *,
        reset_at: datetime | None = None,
        remaining: int = 0,
        limit: int = 5000,
        is_secondary: bool = False,
    ) -> None:
        """Initialize rate limit error.

        Args:
            message: Error description.
            reset_at: When the rate limit resets.
            remaining: Remaining requests.
            limit: Total rate limit.
            is_secondary: Whether this is a secondary (abuse) rate limit.
        """
        super().__init__(message, status_code=403)
        self.reset_at = reset_at
        self.remaining = remaining
        self.limit = limit
        self.is_secondary = is_secondary


@dataclass
class RateLimitInfo:
    """GitHub API rate limit information."""

    limit: int
    remaining: int
    reset_at: datetime

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> RateLimitInfo:
        """Parse rate limit info from response headers.

        Missing headers (e.g. from GitHub Enterprise or a test transport)
        read as a full quota.
        """
        limit = int(headers.get("X-RateLimit-Limit", 5000))
        remaining = int(headers.get("X-RateLimit-Remaining", limit))
        reset_timestamp = int(headers.get("X-RateLimit-Reset", 0))

        return cls(
            limit=limit,
            remaining=remaining,
            reset_at=datetime.fromtimestamp(reset_timestamp, tz=UTC),
        )


class GitHubClient:
    """Async GitHub API client.

    The client supports both context manager and standalone usage:

        async with GitHubClient() as client:
            labels = await client.get_issue_labels("octocat", "hello-world", 42)
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = f"prlabeler/{__version__}",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub token. If None, reads from GITHUB_TOKEN.
            base_url: GitHub API base URL.
            user_agent: User-Agent header value.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (for testing).
        """
        self._token = token if token is not None else get_github_token()
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._rate_limit: RateLimitInfo | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Get default request headers."""
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self._user_agent,
        }

    async def __aenter__(self) -> GitHubClient:
        """Enter async context."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def rate_limit(self) -> RateLimitInfo | None:
        """Get rate limit information from the last response."""
        return self._rate_limit

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure we have an active client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self.headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _handle_response(
        self,
        response: httpx.Response,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Handle API response and update rate limit info.

        Args:
            response: HTTP response.

        Returns:
            Parsed JSON response (empty dict for bodiless success).

        Raises:
            RateLimitError: If rate limit exceeded.
            GitHubAPIError: For other API errors.
        """
        self._rate_limit = RateLimitInfo.from_headers(response.headers)

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()  # type: ignore[no-any-return]

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}
        if not isinstance(body, dict):
            body = {"message": str(body)}
        message = str(body.get("message", ""))

        if response.status_code in (403, 429):
            if "secondary rate limit" in message.lower() or "abuse" in message.lower():
                raise RateLimitError(
                    f"GitHub secondary rate limit: {message}",
                    reset_at=self._rate_limit.reset_at,
                    remaining=self._rate_limit.remaining,
                    limit=self._rate_limit.limit,
                    is_secondary=True,
                )

            if "rate limit" in message.lower() or self._rate_limit.remaining == 0:
                raise RateLimitError(
                    f"GitHub API rate limit exceeded "
                    f"({self._rate_limit.remaining}/{self._rate_limit.limit} remaining, "
                    f"resets at {self._rate_limit.reset_at.isoformat()}): {message}",
                    reset_at=self._rate_limit.reset_at,
                    remaining=self._rate_limit.remaining,
                    limit=self._rate_limit.limit,
                )

            raise GitHubAPIError(
                f"GitHub API access denied: {message}",
                status_code=response.status_code,
                response_body=body,
            )

        if response.status_code == 401:
            raise GitHubAPIError(
                "GitHub API authentication failed",
                status_code=401,
                response_body=body,
            )

        raise GitHubAPIError(
            f"GitHub API error: {response.status_code} - {message or 'Unknown error'}",
            status_code=response.status_code,
            response_body=body,
        )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send a request, wrapping network failures."""
        client = await self._ensure_client()
        logger.debug("%s %s", method, path)
        try:
            return await client.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            raise GitHubAPIError(f"Request to GitHub failed: {e}") from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make a request to the GitHub API.

        Args:
            method: HTTP method.
            path: API path (e.g., "/repos/octocat/hello-world") or full URL.
            params: Query parameters.
            json: JSON request body.

        Returns:
            Parsed JSON response.
        """
        response = await self._send(method, path, params=params, json=json)
        return self._handle_response(response)

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make a GET request to the GitHub API."""
        return await self.request("GET", path, params=params)

    async def put(
        self,
        path: str,
        *,
        json: Any = None,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make a PUT request to the GitHub API."""
        return await self.request("PUT", path, json=json)

    async def get_paginated(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        max_pages: int | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Make paginated GET requests to the GitHub API.

        Args:
            path: API path.
            params: Query parameters.
            max_pages: Maximum number of pages to fetch (None for unlimited).

        Yields:
            Items from each page.
        """
        params = dict(params or {})
        params.setdefault("per_page", 100)

        next_url: str | None = path
        current_params: dict[str, Any] | None = params
        page_count = 0

        while next_url:
            if max_pages and page_count >= max_pages:
                break

            response = await self._send("GET", next_url, params=current_params)
            result = self._handle_response(response)

            if isinstance(result, list):
                for item in result:
                    yield item
            else:
                yield result

            page_count += 1
            next_url = self._parse_next_link(response.headers.get("Link", ""))
            # Subsequent page URLs already carry the query string
            current_params = None

    @staticmethod
    def _parse_next_link(link_header: str) -> str | None:
        """Parse the 'next' URL from Link header.

        Args:
            link_header: Link header value.

        Returns:
            Next page URL or None.
        """
        if not link_header:
            return None

        # Link header format: <url>; rel="next", <url>; rel="last"
        for part in link_header.split(","):
            match = re.match(r'<([^>]+)>;\s*rel="next"', part.strip())
            if match:
                return match.group(1)

        return None

    async def get_file_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        ref: str | None = None,
    ) -> str:
        """Read a text file from a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: File path inside the repository.
            ref: Branch, tag or SHA. Defaults to the default branch.

        Returns:
            Decoded file content.

        Raises:
            GitHubAPIError: If the file is missing, is not a file, or
                cannot be decoded.
        """
        params = {"ref": ref} if ref else None
        result = await self.get(
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}",
            params=params,
        )

        if not isinstance(result, dict) or result.get("type") != "file":
            raise GitHubAPIError(
                f"'{path}' in {owner}/{repo} is not a file",
                status_code=None,
            )

        content = result.get("content", "")
        if result.get("encoding") != "base64":
            return str(content)

        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise GitHubAPIError(
                f"Cannot decode '{path}' in {owner}/{repo}: {e}",
            ) from e

    async def get_issue_labels(
        self,
        owner: str,
        repo: str,
        number: int,
    ) -> list[str]:
        """List the labels on an issue or pull request.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Issue or PR number.

        Returns:
            Label names.
        """
        return [
            label["name"]
            async for label in self.get_paginated(
                f"/repos/{owner}/{repo}/issues/{number}/labels"
            )
        ]

    async def replace_issue_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        labels: list[str],
    ) -> list[str]:
        """Replace all labels on an issue or pull request.

        Labels that do not exist in the repository yet are created by
        GitHub with a default color.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Issue or PR number.
            labels: Complete label set to apply.

        Returns:
            Label names now on the issue.
        """
        result = await self.put(
            f"/repos/{owner}/{repo}/issues/{number}/labels",
            json={"labels": list(labels)},
        )
        if isinstance(result, list):
            return [label["name"] for label in result]
        return list(labels)

    def __repr__(self) -> str:
        """Get string representation."""
        return (
            f"GitHubClient(base_url={self._base_url!r}, "
            f"token={mask_token(self._token)!r})"
        )
