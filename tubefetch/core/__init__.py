from .errors import InvalidInput, NotFound, ProviderError, UpstreamFailure

__all__ = ["InvalidInput", "NotFound", "ProviderError", "UpstreamFailure"]
