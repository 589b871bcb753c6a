from typing import List, Optional


class QuickFixError(RuntimeError):
    """Base error for probe and action failures."""


class CommandNotFound(QuickFixError):
    """Raised when an external binary is not installed."""

    def __init__(self, binary: str):
        super().__init__(f"command not found: {binary}")
        self.binary = binary


class ProbeUnavailable(QuickFixError):
    """Raised when a probe cannot run because its collaborator is missing."""


class ActionTotalFailure(QuickFixError):
    """Raised when an action could not do any of its work."""


class ActionPartialFailure(QuickFixError):
    """Raised when a multi-resource action failed on some of its resources."""

    def __init__(self, message: str, succeeded: Optional[List[str]] = None, failed: Optional[List[str]] = None):
        super().__init__(message)
        self.succeeded = succeeded or []
        self.failed = failed or []


class FatalConfigurationError(QuickFixError):
    """Raised when settings are unusable for a non-interactive batch run."""
