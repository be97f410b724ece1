"""Transient data models rebuilt on every event.

Nothing here is persisted: the comment text and the run/deployment state
owned by GitHub are the only durable records.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChangeEvent:
    """An edit of the triggers comment made by the bot account."""

    previous_body: str
    current_body: str
    pr_number: int
    pr_url: str
    actor_login: str
    commit_sha: str | None = None


@dataclass(frozen=True)
class PendingDeployment:
    environment_id: int
    environment_name: str = ""
    waiting_for_reviewers: bool = False

    @classmethod
    def from_api(cls, data: dict) -> PendingDeployment:
        """Build from one element of the pending_deployments API response.

        The environment id is coerced to int so it compares equal to the ids
        in the environment table regardless of how the payload encodes it.
        """
        environment = data.get("environment") or {}
        return cls(
            environment_id=int(environment.get("id", 0) or 0),
            environment_name=environment.get("name") or "",
            waiting_for_reviewers=bool(data.get("current_user_can_approve")),
        )


@dataclass
class WorkflowResult:
    """Outcome of processing one toggled workflow."""

    workflow: str
    status: str  # "approved" | "dispatched" | "not_found" | "noop" | "aborted" | "skipped" | "failed"
    detail: str = ""
    kind: str | None = None  # failure category: "configuration" | "timeout" | "external" ...

    @property
    def failed(self) -> bool:
        return self.status == "failed"


@dataclass
class EventReport:
    pr_number: int
    commit_sha: str | None
    results: list[WorkflowResult] = field(default_factory=list)

    @property
    def failures(self) -> list[WorkflowResult]:
        return [r for r in self.results if r.failed]

    @property
    def succeeded(self) -> list[WorkflowResult]:
        return [r for r in self.results if r.status in ("approved", "dispatched")]
