from core.integrations.ats.base import ATSResponse, BaseATSProvider, CandidatePayload
from core.integrations.ats.registry import (
    PROVIDERS,
    UnsupportedProviderError,
    build_provider,
    get_provider_class,
)

__all__ = [
    "ATSResponse",
    "BaseATSProvider",
    "CandidatePayload",
    "PROVIDERS",
    "UnsupportedProviderError",
    "build_provider",
    "get_provider_class",
]
