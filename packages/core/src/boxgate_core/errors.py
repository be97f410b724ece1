"""Exception hierarchy for boxgate.

The CLI distinguishes three failure modes:
  - ValidationError            → hard fail before any side effect
  - EnvironmentNotFoundError   → configuration inconsistency for one workflow
  - ApprovalTimeoutError /
    InconsistentDeploymentError → per-workflow failure, aggregated at the end

External-call failures surface as PyGithub's GithubException and are handled
per workflow by the event handler.
"""

from __future__ import annotations


class BoxgateError(Exception):
    """Base class for every error raised by boxgate itself."""


class ValidationError(BoxgateError):
    """Inputs or configuration are unusable; abort before touching GitHub."""


class ConfigError(ValidationError):
    """The configuration file or environment variables could not be parsed."""


class EnvironmentNotFoundError(BoxgateError):
    """A workflow is mapped to an environment that does not exist in the repository."""

    def __init__(self, workflow: str, environment: str):
        self.workflow = workflow
        self.environment = environment
        super().__init__(
            f"Workflow '{workflow}' is mapped to environment '{environment}', "
            "but no such environment exists in the repository."
        )


class ApprovalTimeoutError(BoxgateError):
    """A run never reached the 'waiting' state within the poll budget."""

    def __init__(self, run_id: int, timeout: float):
        self.run_id = run_id
        self.timeout = timeout
        super().__init__(f"Timeout: workflow run {run_id} did not become 'waiting' within {timeout:g}s.")


class InconsistentDeploymentError(BoxgateError):
    """A waiting run has pending deployments, but none for the target environment."""
