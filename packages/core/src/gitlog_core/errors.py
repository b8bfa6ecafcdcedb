"""Error taxonomy shared by every gitlogmcp layer.

The dispatcher converts any of these into a single ``Error: ...`` line for
the caller, so each exception carries a message that already names the
offending commit, file, or field. Nothing here is retried automatically.
"""

from __future__ import annotations

import math


class GitLogError(Exception):
    """Base class for all failures surfaced through a tool response."""


class ValidationError(GitLogError):
    """Caller input was malformed or unsafe. Raised before any side effect."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class ConfigurationError(GitLogError):
    """A completion-backed tool was used without an API key and model id,
    or startup configuration is malformed."""


class RateLimitExceeded(GitLogError):
    """The client-side admission controller denied an outbound call."""

    def __init__(self, wait_ms: float):
        self.wait_ms = wait_ms
        seconds = max(1, math.ceil(wait_ms / 1000))
        super().__init__(f"Rate limit exceeded. Please wait {seconds} seconds.")


class BackendError(GitLogError):
    """An external collaborator reported a failure.

    ``status`` is the originating backend's status: an HTTP code for the
    completion API, the process exit code for git, or None for transport
    failures where no status exists.
    """

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class GitBackendError(BackendError):
    """git exited non-zero, timed out, or is not installed."""


class CompletionBackendError(BackendError):
    """The completion API rejected the request or could not be reached."""


class UnknownToolError(GitLogError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class OutputDirectoryError(GitLogError):
    """The report directory could not be created or is not writable."""


class ToolTimeoutError(GitLogError):
    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(f"Tool '{name}' timed out after {timeout:g}s")
