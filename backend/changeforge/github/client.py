"""
ChangeForge — GitHub REST API client.

Synchronous workflow, one authenticated httpx.Client per run.

Key endpoints used:
  GET /repos/{owner}/{repo}                         — repository lookup
  GET /repos/{owner}/{repo}/tags                    — tag list (paginated)
  GET /repos/{owner}/{repo}/branches                — branch list (paginated)
  GET /repos/{owner}/{repo}/compare/{base}...{head} — commits between refs
  GET /repos/{owner}/{repo}/commits/{sha}           — single commit
  GET /repos/{owner}/{repo}/contents/{path}?ref=    — existing file + sha
  PUT /repos/{owner}/{repo}/contents/{path}         — create or update file

Non-2xx responses are logged and raised as httpx.HTTPStatusError. The
two lookups where absence is normal (repository, contents) check for 404
before raising.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Iterator
from urllib.parse import quote

import httpx

from changeforge.errors import RepositoryNotFoundError
from changeforge.github.auth import GitHubCredentials
from changeforge.models.forge import (
    Branch,
    CommitRecord,
    ExistingDocument,
    FileContentRequest,
    Repository,
    Tag,
)
from changeforge.utils.logging import logger

PER_PAGE = 100
USER_AGENT = "changeforge"


class GitHubClient:
    """Thin synchronous wrapper around the GitHub REST API."""

    def __init__(
        self,
        base_url: str,
        credentials: GitHubCredentials,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
        headers.update(credentials.as_headers())
        self._http = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ---- Transport helpers ----

    @staticmethod
    def _repo_path(repo: Repository) -> str:
        return f"/repos/{quote(repo.owner, safe='')}/{quote(repo.name, safe='')}"

    def _check(self, resp: httpx.Response) -> httpx.Response:
        if not resp.is_success:
            logger.error(
                "  GitHub %s %s returned %d: %s",
                resp.request.method, resp.request.url.path, resp.status_code, resp.text[:500],
            )
        resp.raise_for_status()
        return resp

    def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return self._http.get(url, params=params)

    def _paginate(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        data_key: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield items across pages, following the Link rel="next" header."""
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)
        next_url: str | None = url
        while next_url:
            resp = self._check(self._get(next_url, params=params))
            data = resp.json()
            items = data.get(data_key, []) if data_key else data
            yield from items
            next_url = resp.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None

    # ---- Collaborator interface ----

    def get_repository(self, owner: str, name: str) -> Repository:
        resp = self._get(f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}")
        if resp.status_code == 404:
            raise RepositoryNotFoundError(owner, name)
        return Repository.from_api(self._check(resp).json())

    def get_tags(self, repo: Repository) -> list[Tag]:
        return [Tag.from_api(t) for t in self._paginate(f"{self._repo_path(repo)}/tags")]

    def get_branches(self, repo: Repository) -> list[Branch]:
        return [Branch.from_api(b) for b in self._paginate(f"{self._repo_path(repo)}/branches")]

    def compare_commits(self, repo: Repository, base_sha: str, head_sha: str) -> list[CommitRecord]:
        url = f"{self._repo_path(repo)}/compare/{base_sha}...{head_sha}"
        return [CommitRecord.from_api(c) for c in self._paginate(url, data_key="commits")]

    def get_commit(self, repo: Repository, sha: str) -> CommitRecord:
        resp = self._check(self._get(f"{self._repo_path(repo)}/commits/{sha}"))
        return CommitRecord.from_api(resp.json())

    def get_file(self, repo: Repository, path: str, ref: str | None = None) -> ExistingDocument | None:
        """Return the file at `path` on `ref`, or None if it does not exist."""
        params = {"ref": ref} if ref else None
        resp = self._get(f"{self._repo_path(repo)}/contents/{quote(path)}", params=params)
        if resp.status_code == 404:
            return None
        data = self._check(resp).json()
        if isinstance(data, list):
            # a directory listing; nothing to update in place
            return None
        return ExistingDocument(
            path=data.get("path", path),
            sha=data["sha"],
            content=_decode_content(data.get("content", "")),
        )

    def put_file(self, repo: Repository, path: str, request: FileContentRequest) -> dict[str, Any]:
        """Create or update a file. Updates when request.sha is present."""
        resp = self._http.put(
            f"{self._repo_path(repo)}/contents/{quote(path)}",
            json=request.to_payload(),
        )
        return self._check(resp).json()


def _decode_content(encoded: str) -> str:
    try:
        return base64.b64decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        logger.warning("  Existing file content is not UTF-8 text; ignoring body")
        return ""
