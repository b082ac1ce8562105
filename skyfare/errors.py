"""Exception types raised by the fare engine."""


class ValidationError(ValueError):
    """A search or calendar request failed input validation."""


class GDSError(Exception):
    """The GDS call failed (transport, HTTP status or payload)."""


class GDSAuthError(GDSError):
    """The GDS rejected our credentials or the token call failed."""
