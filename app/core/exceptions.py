class LeagueError(Exception):
    """Base class for every error the league services raise."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(LeagueError):
    """A unique value (e.g. username) is already taken."""


class UnauthorizedError(LeagueError):
    """Credentials did not match an account."""


class LoginRequired(LeagueError):
    """A protected route was hit without a session identity."""

    def __init__(self, message: str = "Login required"):
        super().__init__(message)


class NotFoundError(LeagueError):
    """Unknown tournament or fixture index."""


class ValidationError(LeagueError):
    """Malformed input such as a negative or non-numeric score."""
