"""
Youdao text translation client.

Synchronous requests-based client implementing the v3 request signature.
The async provider wrapper runs it in a worker thread.

Security:
- NEVER logs the application secret or the request signature
- Only logs query length, status codes and API error codes
"""

import hashlib
import time
import uuid
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from lexicon_hub.config.settings import ProviderCredentials, get_settings
from lexicon_hub.domain.lookup.models import LookupRecord, Origin, RemoteSource
from lexicon_hub.exceptions import ConfigurationError, ProviderError
from lexicon_hub.io.connectors.youdao.models import (
    YoudaoResponse,
    describe_error_code,
)
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


def truncate_for_sign(query: str) -> str:
    """Signature input: q itself, or first 10 + length + last 10 characters."""
    if len(query) <= 20:
        return query
    return f"{query[:10]}{len(query)}{query[-10:]}"


def build_signature(
    api_id: str, query: str, salt: str, curtime: str, api_key: str
) -> str:
    raw = f"{api_id}{truncate_for_sign(query)}{salt}{curtime}{api_key}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class YoudaoClient:
    """
    Client for the Youdao text translation endpoint.

    Args:
        base_url: Endpoint URL. Defaults to settings.
        timeout: Request timeout in seconds. Defaults to settings.
        session: Optional requests session (tests inject a mock).
        proxies: Optional requests proxy mapping.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
        proxies: Optional[Dict[str, str]] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.youdao_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "lexicon-hub",
                "Accept": "application/json",
            }
        )
        if proxies is None:
            proxies = settings.proxies
        if proxies:
            self.session.proxies.update(proxies)

    def build_params(
        self,
        query: str,
        credentials: ProviderCredentials,
        *,
        salt: Optional[str] = None,
        curtime: Optional[str] = None,
    ) -> Dict[str, str]:
        if not credentials.api_id:
            raise ConfigurationError("Youdao API ID not configured")
        if not credentials.api_key:
            raise ConfigurationError("Youdao API Key not configured")

        salt = salt or str(uuid.uuid4())
        curtime = curtime or str(int(time.time()))
        return {
            "q": query,
            "from": "auto",
            "to": "auto",
            "appKey": credentials.api_id,
            "salt": salt,
            "sign": build_signature(
                credentials.api_id, query, salt, curtime, credentials.api_key
            ),
            "signType": "v3",
            "curtime": curtime,
        }

    def translate(self, query: str, credentials: ProviderCredentials) -> LookupRecord:
        """
        Look up query and map the response onto a LookupRecord.

        Raises:
            ConfigurationError: If credentials are missing.
            ProviderError: On network failure, bad HTTP status, malformed
                body or a non-zero Youdao error code.
        """
        params = self.build_params(query, credentials)
        logger.debug("youdao_client.request", query_length=len(query))

        try:
            response = self.session.get(
                self.base_url, params=params, timeout=self.timeout
            )
            response.raise_for_status()
            payload: Any = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning("youdao_client.http_error", status_code=status)
            raise ProviderError(
                f"Youdao request failed with HTTP {status}", original_error=e
            ) from e
        except requests.RequestException as e:
            logger.warning("youdao_client.network_error", error_type=type(e).__name__)
            raise ProviderError(f"Youdao request failed: {e}", original_error=e) from e
        except ValueError as e:
            raise ProviderError(
                "Youdao returned a non-JSON body", original_error=e
            ) from e

        try:
            parsed = YoudaoResponse.model_validate(payload)
        except ValidationError as e:
            raise ProviderError(
                "Youdao response has an unexpected shape", original_error=e
            ) from e

        if parsed.error_code != "0":
            message = describe_error_code(parsed.error_code)
            logger.warning("youdao_client.api_error", error_code=parsed.error_code)
            raise ProviderError(
                f"Youdao API Error {parsed.error_code}: {message}",
                code=parsed.error_code,
            )

        return self.to_record(query, parsed)

    @staticmethod
    def to_record(query: str, response: YoudaoResponse) -> LookupRecord:
        record = LookupRecord(query=query, origin=Origin.remote(RemoteSource.YOUDAO))
        record.translations = list(response.translation or [])

        if response.basic is not None:
            record.pronunciation = response.basic.phonetic
            record.pronunciation_us = response.basic.us_phonetic
            record.pronunciation_uk = response.basic.uk_phonetic
            record.translations.extend(response.basic.explains or [])

        record.examples = [
            (entry.key, "; ".join(entry.value or [])) for entry in response.web or []
        ]
        record.found = record.has_content
        return record

    def close(self) -> None:
        self.session.close()
