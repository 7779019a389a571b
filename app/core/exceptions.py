"""Domain exceptions; the API layer maps each family to an HTTP status."""


class MandapException(Exception):
    """Root of every error raised on purpose by the application."""


class ValidationError(MandapException):
    """Input is well-formed but not acceptable (bad status, inverted range, unknown field)."""


class NotFoundError(MandapException):
    """A referenced lead, vendor, proposal or line does not exist or is not visible."""


class DatabaseError(MandapException):
    """The database could not be reached or refused the unit of work."""


class ConfigurationError(MandapException):
    """Environment configuration failed validation at startup."""


class AuthenticationError(MandapException):
    """Missing, malformed, expired or wrong-use bearer token."""


class AuthorizationError(MandapException):
    """The caller's role lacks a required scope."""
