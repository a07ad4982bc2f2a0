"""
ChangeForge — FastAPI Backend

Endpoints:
  POST /v1/changelog  — Generate and publish CHANGELOG.md for a repository
  GET  /health        — Health check

The GitHub host and token come from the environment (see core.config);
everything else is supplied per request.
"""

import time
import uuid

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from changeforge.core.config import settings, validate_github_config
from changeforge.errors import ChangeForgeError, RepositoryNotFoundError
from changeforge.github.auth import GitHubCredentials
from changeforge.models.changelog import INTEGRATION_BRANCH
from changeforge.pipeline.publisher import create_changelog
from changeforge.utils.logging import logger

VERSION = "1.0.0"

app = FastAPI(
    title="ChangeForge API",
    description=(
        "Generate a Markdown change log from a GitHub repository's tags and "
        "merged pull requests, and commit it back to the repository."
    ),
    version=VERSION,
)


@app.on_event("startup")
async def _startup_banner():
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║             ChangeForge  ·  API Server           ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  POST /v1/changelog     → Publish change log     ║")
    logger.info("║  GET  /health           → Health check           ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  GitHub host : %-33s║", settings.github.host)
    logger.info("║  Token       : %-33s║", "✓ loaded" if settings.github.token else "✗ missing")
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")


# ──────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────

class ChangelogRequest(BaseModel):
    owner: str = Field(..., min_length=1, description="Repository owner (user or organisation)")
    repository: str = Field(..., min_length=1, description="Repository name")
    branch: str = Field(..., min_length=1, description="Branch the change log is committed to")
    path: str = Field(..., min_length=1, description="Change log file path, relative to the repository root")
    parse_jira_references: bool = Field(
        default=False,
        description="Link JIRA-style keys (ABC-123) found in pull request titles",
    )
    jira_url: str | None = Field(default=None, description="JIRA base URL, required with parse_jira_references")
    integration_branch: str = Field(
        default=INTEGRATION_BRANCH,
        description="Branch whose tip heads the 'upcoming' section",
    )


# ──────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "changeforge-api", "version": VERSION}


@app.post(
    "/v1/changelog",
    responses={
        200: {"description": "Change log published"},
        404: {"description": "Repository not found"},
        422: {"description": "Validation or configuration error"},
        500: {"description": "GitHub API or pipeline error"},
    },
)
def publish_changelog(req: ChangelogRequest):
    """
    Build the change log for the repository and commit it to `branch`.

    Creates the file on first run and updates it (using the existing
    file's sha) on later runs. Returns the PublishResult as JSON.
    """
    request_id = uuid.uuid4().hex[:12]
    start = time.perf_counter()
    logger.info(
        "[%s] POST /v1/changelog — %s/%s → %s@%s | jira=%s",
        request_id, req.owner, req.repository, req.path, req.branch,
        "yes" if req.parse_jira_references else "no",
    )

    try:
        validate_github_config(settings.github)
        result = create_changelog(
            {
                "host": settings.github.host,
                "owner": req.owner,
                "repository": req.repository,
                "changelog_branch": req.branch,
                "changelog_path": req.path,
                "parse_jira_references": req.parse_jira_references,
                "jira_url": req.jira_url,
                "integration_branch": req.integration_branch,
            },
            credentials=GitHubCredentials(token=settings.github.token),
            timeout=settings.github.timeout,
        )
    except RepositoryNotFoundError as exc:
        logger.warning("[%s] Repository not found: %s/%s", request_id, req.owner, req.repository)
        raise HTTPException(status_code=404, detail=exc.to_dict())
    except ChangeForgeError as exc:
        logger.warning("[%s] ChangeForge error: %s", request_id, exc.code)
        raise HTTPException(status_code=422, detail=exc.to_dict())
    except Exception as exc:
        logger.exception("[%s] Change log run failed", request_id)
        raise HTTPException(status_code=500, detail=str(exc))

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("[%s] Complete — %d bytes in %.0f ms", request_id, result.size_bytes, elapsed_ms)
    return result.model_dump()
