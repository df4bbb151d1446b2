class ServiceError(Exception):
    pass


class PlaylistSourceError(ServiceError):
    pass


class CredentialRejectedError(PlaylistSourceError):
    pass


class TranscriptUnavailableError(ServiceError):
    pass


class RateLimitedError(ServiceError):
    pass


class GenerationError(ServiceError):
    pass


class IngredientParseError(ServiceError):
    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class NetworkTimeoutError(ServiceError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(f"Network timeout after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds
