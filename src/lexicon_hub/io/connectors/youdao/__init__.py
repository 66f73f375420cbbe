"""Youdao translation API connector."""

from lexicon_hub.io.connectors.youdao.client import (
    YoudaoClient,
    build_signature,
    truncate_for_sign,
)
from lexicon_hub.io.connectors.youdao.models import YoudaoResponse, describe_error_code

__all__ = [
    "YoudaoClient",
    "YoudaoResponse",
    "build_signature",
    "describe_error_code",
    "truncate_for_sign",
]
