"""Service-level errors, mapped to HTTP responses in main.create_app()."""


class TeamBuilderError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TeamBuilderError):
    """A referenced company, user or team does not exist. Not retried."""

    status_code = 404


class ConflictError(TeamBuilderError):
    """A uniqueness constraint rejected a write."""

    status_code = 409


class ConfigurationError(TeamBuilderError):
    """Invalid configuration (team size, database URL). Fatal, never retried."""

    status_code = 500
