"""Integration tests for the changelog publisher against an in-memory forge."""

import base64
import hashlib
import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from changeforge.errors import RepositoryNotFoundError, ValidationError
from changeforge.github.auth import GitHubCredentials
from changeforge.models.changelog import ChangelogConfig
from changeforge.models.forge import ExistingDocument
from changeforge.models.job import PublishState
from changeforge.pipeline.publisher import COMMIT_MESSAGE, ChangelogPublisher, create_changelog
from conftest import make_branch, make_commit, make_tag

V100 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
V110 = datetime(2024, 4, 18, 16, 3, 11, tzinfo=timezone.utc)
TIP = datetime(2024, 5, 2, 9, 30, tzinfo=timezone.utc)


class FakeForge:
    """Records calls and serves canned tags, branches and comparisons."""

    def __init__(self, repository, existing=None, branches=None, fail_compare=False, fail_put=False):
        self.repository = repository
        self.existing = existing
        self.tags = [make_tag("v1.0.0", "a"), make_tag("v1.1.0", "b")]
        self.branches = branches if branches is not None else [
            make_branch("main", "m"), make_branch("integration", "tip"),
        ]
        self.commits = {"a": make_commit("v1.0.0", "a", V100), "b": make_commit("v1.1.0", "b", V110),
                        "tip": make_commit("tip", "tip", TIP)}
        self.comparisons = {
            ("b", "tip"): [make_commit("Merge pull request #3 from acme/z\n\nShip ABC-12")],
            ("a", "b"): [
                make_commit("Merge pull request #1 from acme/x\n\nFirst feature"),
                make_commit("Bump version"),
                make_commit("Merge pull request #2 from acme/y\n\nSecond feature"),
            ],
        }
        self.fail_compare = fail_compare
        self.fail_put = fail_put
        self.puts = []
        self.calls = []

    def get_repository(self, owner, name):
        self.calls.append("get_repository")
        if (owner, name) != ("acme", "widgets"):
            raise RepositoryNotFoundError(owner, name)
        return self.repository

    def get_tags(self, repo):
        self.calls.append("get_tags")
        return list(self.tags)

    def get_branches(self, repo):
        self.calls.append("get_branches")
        return list(self.branches)

    def compare_commits(self, repo, base_sha, head_sha):
        self.calls.append(f"compare {base_sha}...{head_sha}")
        if self.fail_compare:
            raise httpx.ConnectError("connection refused")
        return self.comparisons.get((base_sha, head_sha), [])

    def get_commit(self, repo, sha):
        self.calls.append(f"get_commit {sha}")
        return self.commits[sha]

    def get_file(self, repo, path, ref=None):
        self.calls.append("get_file")
        return self.existing

    def put_file(self, repo, path, request):
        self.calls.append("put_file")
        if self.fail_put:
            raise httpx.ReadTimeout("write timed out")
        self.puts.append((path, request))
        return {"content": {"path": path}}


@pytest.fixture
def config():
    return ChangelogConfig(
        owner="acme",
        repository="widgets",
        changelog_branch="main",
        changelog_path="CHANGELOG.md",
    )


def _published_text(forge) -> str:
    assert len(forge.puts) == 1
    return base64.b64decode(forge.puts[0][1].content).decode("utf-8")


class TestChangelogPublisher:
    def test_end_to_end_document(self, repository, config):
        forge = FakeForge(repository)
        result = ChangelogPublisher(forge, config).run()

        assert _published_text(forge) == (
            "## Change Log\n"
            "\n### upcoming (2024-05-02 09:30:00 UTC)\n"
            "- [#3](https://github.com/acme/widgets/pull/3) Ship ABC-12\n"
            "\n### v1.1.0 (2024-04-18 16:03:11 UTC)\n"
            "- [#1](https://github.com/acme/widgets/pull/1) First feature\n"
            "- [#2](https://github.com/acme/widgets/pull/2) Second feature\n"
        )
        assert [s.title for s in result.sections] == ["upcoming", "v1.1.0"]
        assert [s.entries for s in result.sections] == [1, 2]
        assert result.entry_count == 3

    def test_steps_run_in_order(self, repository, config):
        forge = FakeForge(repository)
        ChangelogPublisher(forge, config).run()
        assert forge.calls == [
            "get_repository", "get_file", "get_tags", "get_branches",
            "compare b...tip", "get_commit tip",
            "compare a...b", "get_commit b",
            "put_file",
        ]

    def test_create_without_existing_document(self, repository, config):
        forge = FakeForge(repository)
        publisher = ChangelogPublisher(forge, config)
        result = publisher.run()

        _, request = forge.puts[0]
        assert request.sha is None
        assert "sha" not in request.to_payload()
        assert request.message == COMMIT_MESSAGE
        assert request.branch == "main"
        assert result.updated is False
        assert publisher.state == PublishState.PUBLISHED

    def test_update_with_existing_document(self, repository, config):
        existing = ExistingDocument(path="CHANGELOG.md", sha="old-sha", content="## Change Log\n")
        forge = FakeForge(repository, existing=existing)
        result = ChangelogPublisher(forge, config).run()

        assert forge.puts[0][1].sha == "old-sha"
        assert result.updated is True
        assert result.previous_sha == "old-sha"

    def test_without_integration_branch(self, repository, config):
        forge = FakeForge(repository, branches=[make_branch("main", "m")])
        result = ChangelogPublisher(forge, config).run()

        assert [s.title for s in result.sections] == ["v1.1.0"]
        assert "upcoming" not in _published_text(forge)

    def test_no_tags_publishes_title_only(self, repository, config):
        forge = FakeForge(repository)
        forge.tags = []
        result = ChangelogPublisher(forge, config).run()

        assert _published_text(forge) == "## Change Log\n"
        assert result.sections == []

    def test_jira_annotation(self, repository):
        config = ChangelogConfig(
            owner="acme", repository="widgets", changelog_branch="main",
            changelog_path="CHANGELOG.md", parse_jira_references=True,
            jira_url="https://jira.example.com",
        )
        forge = FakeForge(repository)
        ChangelogPublisher(forge, config).run()
        assert "[ABC-12](https://jira.example.com/browse/ABC-12)" in _published_text(forge)

    def test_custom_host_in_links(self, repository):
        config = ChangelogConfig(
            host="git.example.com", owner="acme", repository="widgets",
            changelog_branch="docs", changelog_path="docs/CHANGELOG.md",
        )
        forge = FakeForge(repository)
        result = ChangelogPublisher(forge, config).run()

        assert "(https://git.example.com/acme/widgets/pull/3)" in _published_text(forge)
        assert result.url == "https://git.example.com/acme/widgets/blob/docs/docs/CHANGELOG.md"

    def test_content_hash(self, repository, config):
        forge = FakeForge(repository)
        result = ChangelogPublisher(forge, config).run()
        text = _published_text(forge)
        assert result.content_hash == hashlib.sha256(text.encode("utf-8")).hexdigest()
        assert result.size_bytes == len(text.encode("utf-8"))

    def test_compare_failure_aborts_before_publish(self, repository, config):
        forge = FakeForge(repository, fail_compare=True)
        publisher = ChangelogPublisher(forge, config)

        with pytest.raises(httpx.ConnectError):
            publisher.run()
        assert forge.puts == []
        assert publisher.state == PublishState.FAILED
        assert publisher.timings[-1].step == "render"
        assert publisher.timings[-1].status == "failed"
        assert "connection refused" in publisher.timings[-1].detail

    def test_write_failure_records_failed_publish(self, repository, config):
        forge = FakeForge(repository, fail_put=True)
        publisher = ChangelogPublisher(forge, config)

        with pytest.raises(httpx.ReadTimeout):
            publisher.run()
        assert publisher.state == PublishState.FAILED
        assert [t.step for t in publisher.timings] == [
            "repository", "existing_document", "refs", "ranges", "render", "publish",
        ]
        assert publisher.timings[-1].status == "failed"

    def test_network_calls_are_timed(self, repository, config, caplog):
        forge = FakeForge(repository)
        with caplog.at_level(logging.INFO, logger="changeforge"):
            ChangelogPublisher(forge, config).run()

        messages = [r.getMessage() for r in caplog.records]
        assert "▶ GitHub — compare upcoming — started" in messages
        assert "▶ GitHub — compare v1.1.0 — started" in messages
        assert any(m.startswith("✔ GitHub — write CHANGELOG.md — completed in") for m in messages)

    def test_missing_repository_is_fatal(self, repository):
        config = ChangelogConfig(
            owner="acme", repository="missing", changelog_branch="main", changelog_path="CHANGELOG.md",
        )
        forge = FakeForge(repository)
        publisher = ChangelogPublisher(forge, config)

        with pytest.raises(RepositoryNotFoundError):
            publisher.run()
        assert forge.calls == ["get_repository"]
        assert publisher.timings[0].status == "failed"


class TestCreateChangelog:
    def test_invalid_options(self):
        with pytest.raises(ValidationError):
            create_changelog({"owner": "acme"}, GitHubCredentials(token="t"))

    def test_over_http(self):
        """Full run through GitHubClient with a mocked GitHub API."""
        commit = {"sha": "b", "commit": {"message": "Merge pull request #5 from a/b\n\nHello",
                                         "committer": {"date": "2024-04-18T16:03:11Z"}}}
        routes = {
            "/repos/acme/widgets": {"name": "widgets", "full_name": "acme/widgets", "owner": {"login": "acme"}},
            "/repos/acme/widgets/tags": [{"name": "v1.0.0", "commit": {"sha": "a"}},
                                         {"name": "v1.1.0", "commit": {"sha": "b"}}],
            "/repos/acme/widgets/branches": [{"name": "main", "commit": {"sha": "b"}}],
            "/repos/acme/widgets/compare/a...b": {"commits": [commit]},
            "/repos/acme/widgets/commits/b": commit,
        }
        puts = []

        def handler(request):
            if request.method == "PUT":
                puts.append(json.loads(request.content))
                return httpx.Response(201, json={})
            if request.url.path in routes:
                return httpx.Response(200, json=routes[request.url.path])
            return httpx.Response(404, json={"message": "Not Found"})

        result = create_changelog(
            {"owner": "acme", "repository": "widgets", "changelog_branch": "main",
             "changelog_path": "CHANGELOG.md"},
            GitHubCredentials(token="t"),
            transport=httpx.MockTransport(handler),
        )

        assert len(puts) == 1
        assert "sha" not in puts[0]
        text = base64.b64decode(puts[0]["content"]).decode("utf-8")
        assert text == (
            "## Change Log\n"
            "\n### v1.1.0 (2024-04-18 16:03:11 UTC)\n"
            "- [#5](https://github.com/acme/widgets/pull/5) Hello\n"
        )
        assert result.repository == "acme/widgets"
