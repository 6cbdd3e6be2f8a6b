"""Provider lookup keyed by the configured ``ATSProvider`` value."""

from typing import Any, Dict, Optional, Type

import httpx

from core.integrations.ats.base import BaseATSProvider
from core.integrations.ats.greenhouse import GreenhouseProvider
from core.integrations.ats.lever import LeverProvider
from core.integrations.ats.workday import WorkdayProvider
from database.models.integrations import ATSProvider

PROVIDERS: Dict[ATSProvider, Type[BaseATSProvider]] = {
    ATSProvider.GREENHOUSE: GreenhouseProvider,
    ATSProvider.LEVER: LeverProvider,
    ATSProvider.WORKDAY: WorkdayProvider,
}


class UnsupportedProviderError(ValueError):
    def __init__(self, provider: str):
        super().__init__(f"Unsupported ATS provider: {provider}")
        self.provider = provider


def get_provider_class(provider: ATSProvider | str) -> Type[BaseATSProvider]:
    """
    Raises:
        UnsupportedProviderError: no implementation for ``provider``
    """
    try:
        return PROVIDERS[ATSProvider(provider)]
    except (KeyError, ValueError):
        value = provider.value if isinstance(provider, ATSProvider) else provider
        raise UnsupportedProviderError(value) from None


def build_provider(
    provider: ATSProvider | str,
    api_key: Optional[str],
    api_secret: Optional[str] = None,
    api_url: Optional[str] = None,
    configuration: Optional[Dict[str, Any]] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseATSProvider:
    provider_class = get_provider_class(provider)
    return provider_class(
        api_key=api_key,
        api_secret=api_secret,
        api_url=api_url,
        configuration=configuration,
        timeout=timeout,
        transport=transport,
    )
