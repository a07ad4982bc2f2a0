"""
ChangeForge — GitHub API authentication helpers.

The REST API authenticates via a bearer token header on every request.
GitHub Enterprise hosts serve the API under /api/v3 on the same host.
"""

from dataclasses import dataclass

PUBLIC_HOST = "github.com"
PUBLIC_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class GitHubCredentials:
    token: str

    def as_headers(self) -> dict[str, str]:
        """Return the auth headers required by the GitHub API."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def api_base_url(host: str) -> str:
    """Map a forge host name to its REST API root."""
    host = host.strip().rstrip("/")
    if host.startswith(("http://", "https://")):
        host = host.split("://", 1)[1]
    if host in (PUBLIC_HOST, "api.github.com"):
        return PUBLIC_API_URL
    return f"https://{host}/api/v3"
