from typing import Dict, Type
from tickstore.services.market_data.base import IntradayDataProvider, ProviderError
from tickstore.services.market_data.marketstack_provider import MarketstackProvider
from tickstore.core.config import settings

PROVIDERS: Dict[str, Type[IntradayDataProvider]] = {
    "marketstack": MarketstackProvider,
}


def get_market_data_provider(name: str | None = None) -> IntradayDataProvider:
    """Factory to get provider instance."""
    provider_name = name or settings.MARKET_DATA_PROVIDER
    provider_class = PROVIDERS.get(provider_name)
    if not provider_class:
        raise ValueError(f"Unknown provider: {provider_name}")
    return provider_class()


__all__ = [
    "PROVIDERS",
    "IntradayDataProvider",
    "MarketstackProvider",
    "ProviderError",
    "get_market_data_provider",
]
