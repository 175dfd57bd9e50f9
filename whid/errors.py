"""Error taxonomy shared by the data loaders and the summary client.

Data-load errors propagate to the session loop; summary errors are turned
into popup text at the collaborator boundary.
"""

from __future__ import annotations


class WhidError(Exception):
    """Base class for recoverable application errors."""


class ExternalToolError(WhidError):
    """A ``git`` invocation failed or produced output we could not parse."""

    def __init__(self, command: list[str], message: str) -> None:
        self.command = list(command)
        self.message = message.strip()
        super().__init__(f"{' '.join(self.command)}: {self.message}" if self.message else " ".join(self.command))


class SummaryError(WhidError):
    """Base class for failures of the AI summary request."""


class AuthError(SummaryError):
    """The provider rejected the configured credential."""


class NetworkError(SummaryError):
    """The request never produced an HTTP response."""


class ProviderError(SummaryError):
    """The provider answered with an error or an unusable payload."""
