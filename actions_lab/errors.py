from __future__ import annotations

from typing import Optional


class LabError(Exception):
    """Base class for actions_lab errors."""


class ValidationError(LabError):
    """Raised when a config file or workflow fails validation."""


class WorkflowFormatError(ValidationError):
    """Raised when a workflow file is not a structurally valid workflow document."""

    def __init__(self, source_path: str, message: str) -> None:
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path


class NotConfiguredError(LabError):
    """Raised when required environment (token, repository) is missing."""


class GitHubApiError(LabError):
    """Raised when the GitHub REST API answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
