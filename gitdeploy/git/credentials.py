"""
Scoped git credentials.

Credentials are bound to a single command through environment-provided
git configuration (GIT_CONFIG_COUNT/KEY/VALUE). Nothing is written to the
repository config, the remote URL, or a credential helper, so two
deployments to different targets never share authentication state.
"""

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class GitCredentials:
    """Username/password pair for one remote URL."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"GitCredentials(username={self.username!r}, password='***')"

    def auth_header(self) -> str:
        """HTTP Basic authorization header value."""
        token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8")).decode("ascii")
        return f"Authorization: Basic {token}"

    def to_env(self) -> dict[str, str]:
        """Environment that injects these credentials into one git command."""
        return {
            "GIT_CONFIG_COUNT": "1",
            "GIT_CONFIG_KEY_0": "http.extraHeader",
            "GIT_CONFIG_VALUE_0": self.auth_header(),
        }


def credentials_env(credentials: GitCredentials | None) -> dict[str, str] | None:
    """Per-command environment for optional credentials."""
    if credentials is None or not credentials.username:
        return None
    return credentials.to_env()
