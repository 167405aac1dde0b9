"""
Exception hierarchy for the ETL comparison agent.

Every error the agent raises on purpose derives from AgentError so the
job-dispatch boundary can turn it into a failed job result with a
human-readable message.
"""


class AgentError(Exception):
    """Base exception for agent errors."""

    pass


class ConfigurationError(AgentError):
    """Raised for invalid or unsupported configuration. Never retried."""

    pass


class UnsupportedEngineError(ConfigurationError):
    """Raised when an engine type has no registered dialect or executor."""

    pass


class InvalidIdentifierError(ConfigurationError):
    """Raised when an identifier cannot be quoted safely."""

    pass


class CapabilityError(AgentError):
    """Raised when the platform lacks a capability the request needs."""

    pass


class IntegratedAuthUnavailableError(CapabilityError):
    """Raised when trusted SQL Server auth has no driver and no sqlcmd fallback."""

    pass


class DatabaseConnectionError(AgentError):
    """Raised when the network/auth handshake with a database fails."""

    pass


class QueryError(AgentError):
    """Raised when the engine rejects a statement."""

    pass


class NoCommonColumnsError(AgentError):
    """Raised when source and target result sets share no comparable columns."""

    pass


class UnknownJobTypeError(AgentError):
    """Raised when a job carries a type the agent has no handler for."""

    def __init__(self, job_type: str):
        self.job_type = job_type
        super().__init__(f"Unknown job type: {job_type}")


class ControlPlaneError(AgentError):
    """Raised when a control plane request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(ControlPlaneError):
    """Raised when the control plane rejects the agent key."""

    pass


class ControlPlaneUnavailableError(ControlPlaneError):
    """Raised when the control plane cannot be reached (connection error or timeout)."""

    pass
