"""Remote dictionary providers."""

from lexicon_hub.infrastructure.providers.youdao_provider import (
    RemoteProvider,
    YoudaoProvider,
)

__all__ = ["RemoteProvider", "YoudaoProvider"]
