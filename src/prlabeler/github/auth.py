"""GitHub token discovery and masking."""

from __future__ import annotations

import os


class AuthenticationError(Exception):
    """Raised when no usable GitHub credentials are available."""


def get_github_token() -> str:
    """Get GitHub token from environment.

    Returns:
        GitHub token (personal access token or Actions GITHUB_TOKEN).

    Raises:
        AuthenticationError: If GITHUB_TOKEN is not set.
    """
    token = os.environ.get("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "GITHUB_TOKEN environment variable is not set. "
            "Set it to a token with pull request write access."
        )
    return token


def mask_token(token: str) -> str:
    """Mask a token for safe logging.

    Args:
        token: Token to mask.

    Returns:
        Masked token showing first 4 and last 4 characters.
    """
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
