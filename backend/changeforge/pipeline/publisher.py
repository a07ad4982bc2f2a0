"""
ChangeForge — Changelog publisher.

Runs one changelog generation as a state machine:

  RECEIVED → REPOSITORY_FOUND → EXISTING_DOC_CHECKED → REFS_FETCHED
  → RANGES_BUILT → SECTIONS_RENDERED → PUBLISHED

Ranges are processed strictly in order and the document is written exactly
once, at the end. Any failure before that leaves the target file untouched.
"""

from __future__ import annotations

import base64
import hashlib
import time
import uuid
from typing import Any, Mapping, Protocol

import httpx
import pydantic

from changeforge.errors import ValidationError
from changeforge.github.auth import GitHubCredentials, api_base_url
from changeforge.github.client import GitHubClient
from changeforge.models.changelog import ChangelogConfig, ChangelogDocument, Range
from changeforge.models.forge import (
    Branch,
    CommitRecord,
    ExistingDocument,
    FileContentRequest,
    Repository,
    Tag,
)
from changeforge.models.job import PublishResult, PublishState, SectionSummary, StepTiming
from changeforge.pipeline.annotate import annotate_references
from changeforge.pipeline.classify import extract_entries
from changeforge.pipeline.ranges import find_branch, select_ranges
from changeforge.pipeline.render import pull_request_url, render_document, render_section
from changeforge.utils.logging import logger, step_timer

COMMIT_MESSAGE = "Auto-generated Change Log from Build"


class ForgeClient(Protocol):
    """The subset of the GitHub API the publisher depends on."""

    def get_repository(self, owner: str, name: str) -> Repository: ...

    def get_tags(self, repo: Repository) -> list[Tag]: ...

    def get_branches(self, repo: Repository) -> list[Branch]: ...

    def compare_commits(self, repo: Repository, base_sha: str, head_sha: str) -> list[CommitRecord]: ...

    def get_commit(self, repo: Repository, sha: str) -> CommitRecord: ...

    def get_file(self, repo: Repository, path: str, ref: str | None = None) -> ExistingDocument | None: ...

    def put_file(self, repo: Repository, path: str, request: FileContentRequest) -> dict[str, Any]: ...


def load_changelog_config(options: ChangelogConfig | Mapping[str, Any]) -> ChangelogConfig:
    """Validate raw run options. Raises ValidationError."""
    if isinstance(options, ChangelogConfig):
        return options
    try:
        return ChangelogConfig(**options)
    except pydantic.ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationError(errors) from exc


class ChangelogPublisher:
    """
    State-machine orchestrator for one changelog run.

    Tracks every step's timing and produces a PublishResult with the
    per-section entry counts and the hash of the published document.
    """

    def __init__(self, client: ForgeClient, config: ChangelogConfig):
        self.run_id = uuid.uuid4().hex[:12]
        self.client = client
        self.config = config
        self.state = PublishState.RECEIVED
        self.document: ChangelogDocument | None = None
        self.sections: list[SectionSummary] = []
        self.timings: list[StepTiming] = []
        self._pr_url = pull_request_url(config.host, config.owner, config.repository)

    def _record_step(self, name: str, start: float, status: str = "ok", detail: str = ""):
        ms = int((time.perf_counter() - start) * 1000)
        self.timings.append(StepTiming(step=name, duration_ms=ms, status=status, detail=detail))
        symbol = "✓" if status == "ok" else ("⊘" if status == "skipped" else "✗")
        logger.info("  %s %s — %dms %s", symbol, name, ms, detail)

    @property
    def blob_url(self) -> str:
        c = self.config
        return f"https://{c.host}/{c.owner}/{c.repository}/blob/{c.changelog_branch}/{c.changelog_path}"

    def run(self) -> PublishResult:
        """Execute the full run. Returns a complete PublishResult."""
        cfg = self.config
        logger.info("=" * 60)
        logger.info("[%s] Change log run starting (%s/%s)", self.run_id, cfg.owner, cfg.repository)
        logger.info("=" * 60)
        run_start = time.perf_counter()

        try:
            repo = self._step_repository()
            existing = self._step_existing_document(repo)
            tags, integration = self._step_refs(repo)
            ranges = self._step_ranges(tags, integration)
            text = self._step_render(repo, ranges)
            self.document = ChangelogDocument(
                markdown_text=text,
                existing_sha=existing.sha if existing else None,
            )
            self._step_publish(repo, self.document)
            self.state = PublishState.PUBLISHED
        except Exception:
            self.state = PublishState.FAILED
            raise

        payload = self.document.markdown_text.encode("utf-8")
        total_ms = int((time.perf_counter() - run_start) * 1000)
        logger.info("=" * 60)
        logger.info(
            "[%s] Change log generation complete — %d sections, %d bytes, %dms — %s",
            self.run_id, len(self.sections), len(payload), total_ms, self.blob_url,
        )
        logger.info("=" * 60)

        return PublishResult(
            run_id=self.run_id,
            repository=repo.full_name,
            path=cfg.changelog_path,
            branch=cfg.changelog_branch,
            updated=self.document.existing_sha is not None,
            previous_sha=self.document.existing_sha,
            content_hash=hashlib.sha256(payload).hexdigest(),
            size_bytes=len(payload),
            url=self.blob_url,
            sections=self.sections,
            timings=self.timings,
        )

    def _step_repository(self) -> Repository:
        t = time.perf_counter()
        try:
            repo = self.client.get_repository(self.config.owner, self.config.repository)
        except Exception as exc:
            self._record_step("repository", t, "failed", str(exc))
            raise
        self.state = PublishState.REPOSITORY_FOUND
        logger.info("  Repository: %s found for owner %s", repo.name, repo.owner)
        self._record_step("repository", t)
        return repo

    def _step_existing_document(self, repo: Repository) -> ExistingDocument | None:
        t = time.perf_counter()
        cfg = self.config
        try:
            existing = self.client.get_file(repo, cfg.changelog_path, cfg.changelog_branch)
        except Exception as exc:
            self._record_step("existing_document", t, "failed", str(exc))
            raise
        self.state = PublishState.EXISTING_DOC_CHECKED
        if existing is None:
            self._record_step("existing_document", t, "skipped", "none; will create")
        else:
            logger.info("  Existing change log %s found for update", cfg.changelog_path)
            self._record_step("existing_document", t, detail=f"sha={existing.sha[:12]}")
        return existing

    def _step_refs(self, repo: Repository) -> tuple[list[Tag], Branch | None]:
        t = time.perf_counter()
        try:
            tags = self.client.get_tags(repo)
            integration = find_branch(self.client.get_branches(repo), self.config.integration_branch)
        except Exception as exc:
            self._record_step("refs", t, "failed", str(exc))
            raise
        if integration is None:
            logger.info("  No '%s' branch; skipping upcoming section", self.config.integration_branch)
        self.state = PublishState.REFS_FETCHED
        self._record_step(
            "refs", t,
            detail=f"{len(tags)} tags, {self.config.integration_branch}={'yes' if integration else 'no'}",
        )
        return tags, integration

    def _step_ranges(self, tags: list[Tag], integration: Branch | None) -> list[Range]:
        t = time.perf_counter()
        ranges = select_ranges(tags, integration)
        self.state = PublishState.RANGES_BUILT
        self._record_step("ranges", t, detail=f"{len(ranges)} ranges")
        return ranges

    def _step_render(self, repo: Repository, ranges: list[Range]) -> str:
        t = time.perf_counter()
        try:
            sections = [self._render_range(repo, r) for r in ranges]
        except Exception as exc:
            self._record_step("render", t, "failed", str(exc))
            raise
        self.state = PublishState.SECTIONS_RENDERED
        self._record_step("render", t, detail=f"{len(sections)} sections")
        return render_document(sections)

    def _render_range(self, repo: Repository, rng: Range) -> str:
        cfg = self.config
        logger.info("  Generating changelog for version %s", rng.title)
        with step_timer(f"GitHub — compare {rng.title}"):
            commits = self.client.compare_commits(repo, rng.base.sha, rng.head.sha)
            head = self.client.get_commit(repo, rng.head.sha)

        entries = [
            e.model_copy(update={
                "title": annotate_references(e.title, cfg.parse_jira_references, cfg.jira_url),
            })
            for e in extract_entries(commits)
        ]
        self.sections.append(SectionSummary(
            title=rng.title,
            base_sha=rng.base.sha,
            head_sha=rng.head.sha,
            entries=len(entries),
        ))
        return render_section(rng.title, head.committer_date, entries, self._pr_url)

    def _step_publish(self, repo: Repository, document: ChangelogDocument) -> None:
        t = time.perf_counter()
        cfg = self.config
        request = FileContentRequest(
            message=COMMIT_MESSAGE,
            content=base64.b64encode(document.markdown_text.encode("utf-8")).decode("ascii"),
            branch=cfg.changelog_branch,
            sha=document.existing_sha,
        )
        try:
            with step_timer(f"GitHub — write {cfg.changelog_path}"):
                self.client.put_file(repo, cfg.changelog_path, request)
        except Exception as exc:
            self._record_step("publish", t, "failed", str(exc))
            raise
        self._record_step(
            "publish", t,
            detail=f"{'update' if document.existing_sha else 'create'} {cfg.changelog_path}@{cfg.changelog_branch}",
        )


def create_changelog(
    options: ChangelogConfig | Mapping[str, Any],
    credentials: GitHubCredentials,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> PublishResult:
    """Validate options, open one GitHub client for the run, and publish."""
    config = load_changelog_config(options)
    with GitHubClient(
        base_url=api_base_url(config.host),
        credentials=credentials,
        timeout=timeout,
        transport=transport,
    ) as client:
        return ChangelogPublisher(client, config).run()
