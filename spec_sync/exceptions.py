"""Custom exception hierarchy for spec-sync.

This module defines a small structured exception hierarchy so that the CLI
can convert every failure into a single process-level error message while
callers still get precise types to catch.

Exception Hierarchy:
    SpecSyncError (base)
    ├── ConfigurationError
    ├── RepositoryAccessError
    ├── GitOperationError
    ├── ExternalServiceError
    ├── GeneratorError
    └── SyncError

Example Usage:
    >>> from spec_sync.exceptions import ConfigurationError
    >>> try:
    ...     mappings = parse_sources(raw)
    ... except ValueError as e:
    ...     raise ConfigurationError(f"Invalid sources: {e}") from e
"""


class SpecSyncError(Exception):
    """Base exception for all spec-sync errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(SpecSyncError):
    """Run configuration is missing or invalid.

    Raised before any git or network side effect takes place.

    Examples:
        - No token provided
        - ``sources`` is neither valid YAML nor valid JSON
        - A mapping entry lacks ``from`` or ``to``
        - A mapped source path does not exist
    """

    pass


class RepositoryAccessError(SpecSyncError):
    """The target repository could not be reached or cloned.

    Attributes:
        message: Human-readable error description
        repository: ``owner/repo`` of the repository that failed
        suggestion: Optional remediation hint (token scope, permissions)
    """

    def __init__(
        self,
        message: str,
        repository: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            repository: Repository that could not be accessed
            suggestion: Optional suggestion for resolution
        """
        self.repository = repository
        self.suggestion = suggestion

        full_message = message
        if suggestion:
            full_message = f"{message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class GitOperationError(SpecSyncError):
    """A git subprocess exited unsuccessfully.

    Attributes:
        message: Human-readable error description
        command: The git arguments that were executed (credentials redacted)
        stderr: Captured standard error of the failed command
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            command: Git arguments that failed
            stderr: Captured stderr output
        """
        self.command = command
        self.stderr = stderr

        full_message = message
        if stderr and stderr.strip():
            full_message = f"{message}: {stderr.strip()}"

        super().__init__(full_message)


class ExternalServiceError(SpecSyncError):
    """The repository host API returned an error.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code (if applicable)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
        """
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class GeneratorError(SpecSyncError):
    """The external spec generator could not be installed or failed to run."""

    pass


class SyncError(SpecSyncError):
    """A run failed; the message carries the operation context.

    Raised by the orchestrator to wrap lower level failures, e.g.
    ``Failed to sync changes: Failed to push changes to the repository: ...``.
    """

    pass
