class IdentityError(Exception):
    """Base class for every error raised by the identity store."""
