"""Checkbox toggle detection for the workflow triggers comment.

Each workflow appears in the comment as a markdown task-list line:

    - [ ] `build-preview` on CI at this [workflow](https://github.com/...).

A human "requests" a workflow by ticking its box. GitHub delivers the edit as
an ``issue_comment`` event carrying both the old and the new body, so a toggle
is detected by matching the unchecked line in the old body and the checked
line in the new one.
"""

from __future__ import annotations

import re

_REGEX_METACHARACTERS = re.compile(r"[\\^$.*+?()\[\]{}|]")
_COMMIT_SHA_RE = re.compile(r"commit ([a-f0-9]{40})")

_UNCHECKED_MARKER = r"\[\s*\]"
_CHECKED_MARKER = r"\[\s*[xX]\s*\]"
_LINK_TO_WORKFLOW = r"`\s*on\s*CI\s*at\s*this\s*\[workflow\]"


def escape_label(label) -> str:
    """Escape regex metacharacters in a workflow label.

    Anything that is not a string escapes to "" so the resulting pattern can
    never match a real checkbox line.
    """
    if not isinstance(label, str):
        return ""
    return _REGEX_METACHARACTERS.sub(lambda m: "\\" + m.group(0), label)


def workflow_pattern(label, checked: bool) -> re.Pattern:
    """Compile the pattern matching the checkbox line for ``label``."""
    marker = _CHECKED_MARKER if checked else _UNCHECKED_MARKER
    return re.compile(marker + r"\s*`" + escape_label(label) + _LINK_TO_WORKFLOW)


def was_toggled_on(label, previous_body: str | None, current_body: str | None) -> bool:
    """Return True if the checkbox for ``label`` went from unchecked to checked."""
    if not isinstance(label, str) or not label:
        return False
    previously_unchecked = workflow_pattern(label, checked=False).search(previous_body or "") is not None
    now_checked = workflow_pattern(label, checked=True).search(current_body or "") is not None
    return previously_unchecked and now_checked


def extract_commit_sha(body: str | None) -> str | None:
    """Return the commit SHA the comment was generated against, or None."""
    match = _COMMIT_SHA_RE.search(body or "")
    return match.group(1) if match else None
