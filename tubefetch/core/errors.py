from fastapi import HTTPException


class InvalidInput(HTTPException):
    """Missing or malformed URL or format selector"""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class NotFound(HTTPException):
    """Requested format id or quality does not resolve against the provider's metadata"""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class UpstreamFailure(HTTPException):
    """Provider call failed; the detail is a short message safe to show to clients"""

    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail)


class ProviderError(Exception):
    """Raised by the extraction provider. Carries diagnostics for the server log only."""
