"""Exception types raised across the solvanity package."""


class VanityError(Exception):
    """Base class for all solvanity errors."""


class ConfigurationError(VanityError, ValueError):
    """Invalid pattern or tuning parameter. Raised before any worker starts."""


class SearchFailed(VanityError):
    """A search finished without producing a keypair."""


class SearchTimedOut(SearchFailed):
    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Keypair generation timed out after {timeout_seconds} seconds")


class SearchExhausted(SearchFailed):
    def __init__(self, message: str = "All workers exited without finding a result"):
        super().__init__(message)
