"""Error taxonomy shared by the request path and the reconciliation worker."""


class TrophyMintError(Exception):
    """Base error. ``status_code`` is the HTTP status the web layer responds with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingParameter(TrophyMintError):
    """A required request parameter (or the session identity) is absent."""

    status_code = 400


class Unauthenticated(TrophyMintError):
    """No Steam identity could be resolved for the request."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized: No Steam session found."):
        super().__init__(message)


class ProfileUnreadable(TrophyMintError):
    """Steam reported an expected failure: private profile, unowned game, no stats."""

    status_code = 404


class MetadataNotFound(TrophyMintError):
    """No minted achievement is known for a token id."""

    status_code = 404


class UpstreamUnavailable(TrophyMintError):
    """Transport or HTTP failure talking to an upstream. Retryable by the caller."""

    status_code = 502


class MalformedUpstreamResponse(TrophyMintError):
    """An upstream answered successfully but with an unexpected shape."""

    status_code = 500


class CacheUnavailable(TrophyMintError):
    """The cache store cannot be reached. Never surfaced to callers."""


class ChainQueryFailure(TrophyMintError):
    """A chain RPC call failed. Worker only."""


class SteamConfigError(TrophyMintError):
    """Steam API credentials are missing."""


class InvalidParameter(TrophyMintError):
    """A request parameter is present but unusable."""

    status_code = 400
