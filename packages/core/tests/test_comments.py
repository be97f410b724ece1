"""Tests for rendering and upserting the workflow triggers comment."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from boxgate_core.comments import (
    comment_marker,
    find_trigger_comment,
    render_comment_body,
    upsert_trigger_comment,
    workflow_line,
)
from boxgate_core.toggles import extract_commit_sha, was_toggled_on

SHA = "d" * 40
NOW = datetime(2024, 3, 1, 2, 30, 0, tzinfo=timezone.utc)


def _render(**kwargs):
    defaults = dict(
        owner="owner",
        repo="repo",
        pr_number=42,
        commit_sha=SHA,
        head_ref="feature/x",
        required=["build-preview"],
        optional=["e2e"],
        now=NOW,
    )
    defaults.update(kwargs)
    return render_comment_body(**defaults)


def _comment(login, body, comment_id=1):
    c = MagicMock()
    c.user.login = login
    c.body = body
    c.id = comment_id
    return c


class TestRenderCommentBody:
    def test_contains_marker_and_sections(self):
        body = _render()
        assert comment_marker(42) in body
        assert "## Required" in body
        assert "## Optional" in body

    def test_workflow_lines_link_to_branch(self):
        line = workflow_line("owner", "repo", "build-preview", "feature/x")
        assert line == (
            "- [ ] `build-preview` on CI at this [workflow]"
            "(https://github.com/owner/repo/actions/workflows/build-preview.yml?query=branch%3Afeature%2Fx)."
        )

    def test_commit_sha_is_extractable(self):
        assert extract_commit_sha(_render()) == SHA

    def test_ticking_a_rendered_box_is_detected(self):
        body = _render()
        ticked = body.replace("- [ ] `e2e`", "- [x] `e2e`")
        assert was_toggled_on("e2e", body, ticked)
        assert not was_toggled_on("build-preview", body, ticked)

    def test_doc_link_optional(self):
        assert "[document]" not in _render()
        assert "[document](https://docs.example.com)" in _render(doc_link="https://docs.example.com")

    def test_timestamps_per_timezone(self):
        body = _render(timezones=["Asia/Ho_Chi_Minh", "Australia/Sydney"])
        assert "_01/03/2024 - 09:30:00 (Asia/Ho_Chi_Minh)_" in body
        assert "_01/03/2024 - 13:30:00 (Australia/Sydney)_" in body

    def test_unknown_timezone_falls_back(self):
        body = _render(timezones=["Mars/Olympus_Mons"])
        assert "2024-03-01 (unknown timezone Mars/Olympus_Mons)" in body


class TestFindTriggerComment:
    def test_finds_bot_comment_with_marker(self):
        issue = MagicMock()
        target = _comment("bot", f"x {comment_marker(42)}", 9)
        issue.get_comments.return_value = [_comment("human", comment_marker(42)), target]
        assert find_trigger_comment(issue, "bot", comment_marker(42)) is target

    def test_ignores_bot_comments_without_marker(self):
        issue = MagicMock()
        issue.get_comments.return_value = [_comment("bot", "hello"), _comment("bot", None)]
        assert find_trigger_comment(issue, "bot", comment_marker(42)) is None

    def test_stops_at_first_match(self):
        issue = MagicMock()
        first = _comment("bot", comment_marker(42), 1)
        seen = []

        def comments():
            for c in [first, _comment("bot", comment_marker(42), 2)]:
                seen.append(c.id)
                yield c

        issue.get_comments.return_value = comments()
        assert find_trigger_comment(issue, "bot", comment_marker(42)) is first
        assert seen == [1]


class TestUpsertTriggerComment:
    def test_updates_existing(self, mocker):
        issue = MagicMock()
        existing = _comment("bot", comment_marker(42), 5)
        issue.get_comments.return_value = [existing]
        mocker.patch("boxgate_core.comments.get_issue", return_value=issue)

        assert upsert_trigger_comment(MagicMock(), 42, "new body", "bot") == "updated"
        existing.edit.assert_called_once_with("new body")
        issue.create_comment.assert_not_called()

    def test_creates_when_missing(self, mocker):
        issue = MagicMock()
        issue.get_comments.return_value = []
        mocker.patch("boxgate_core.comments.get_issue", return_value=issue)

        assert upsert_trigger_comment(MagicMock(), 42, "new body", "bot") == "created"
        issue.create_comment.assert_called_once_with("new body")
