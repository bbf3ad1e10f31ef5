class OOBMultipartError(Exception):
    """Base error for oobmultipart."""


class MissingProviderError(OOBMultipartError):
    """Raised when the encoder is read without a part provider configured."""

    def __init__(self, message: str = "no part provider configured") -> None:
        super().__init__(message)


class NoMoreParts(Exception):
    """Raised by a part provider to signal that no parts remain."""
