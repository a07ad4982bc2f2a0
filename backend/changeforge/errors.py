"""
ChangeForge — Structured error catalog.

Every error has a code, human message, and suggested fix.
Transport faults from the GitHub API are not wrapped; they reach the
caller as the underlying httpx exception.
"""

from __future__ import annotations

from typing import Any


class ChangeForgeError(Exception):
    """Base error with structured code + suggestion."""

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class ValidationError(ChangeForgeError):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            code="VALIDATION_FAILED",
            message=f"Input validation failed: {'; '.join(errors)}",
            suggestion="Check required fields: owner, repository, changelog_branch, changelog_path.",
            detail=errors,
        )


class ConfigurationError(ChangeForgeError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            code="CONFIGURATION_MISSING",
            message=f"Missing configuration: {', '.join(missing)}",
            suggestion="Copy backend/.env.example to backend/.env and fill in the GitHub settings.",
            detail=missing,
        )


class RepositoryNotFoundError(ChangeForgeError):
    def __init__(self, owner: str, name: str):
        super().__init__(
            code="REPOSITORY_NOT_FOUND",
            message=f"Repository not found: {owner}/{name}",
            suggestion="Check the owner and repository name, and that the token can read the repository.",
        )
