"""Tests for the Youdao connector and its async provider wrapper."""

import hashlib
from unittest.mock import MagicMock

import pytest
import requests

from lexicon_hub.config.settings import ProviderCredentials
from lexicon_hub.domain.lookup.models import Origin, RemoteSource
from lexicon_hub.exceptions import ConfigurationError, ProviderError
from lexicon_hub.infrastructure.providers.youdao_provider import YoudaoProvider
from lexicon_hub.io.connectors.youdao.client import (
    YoudaoClient,
    build_signature,
    truncate_for_sign,
)
from lexicon_hub.io.connectors.youdao.models import YoudaoResponse, describe_error_code

CREDENTIALS = ProviderCredentials(api_id="app-id", api_key="app-secret")

CAT_RESPONSE = {
    "errorCode": "0",
    "query": "cat",
    "translation": ["猫"],
    "basic": {
        "phonetic": "kæt",
        "us-phonetic": "kæt",
        "uk-phonetic": "kæt",
        "explains": ["n. 猫，猫科动物"],
    },
    "web": [
        {"key": "Cat", "value": ["猫", "卡特彼勒"]},
        {"key": "Cat Stevens", "value": ["凯特·斯蒂文斯"]},
    ],
}


def _client_with_response(payload=None, status_error=None, exc=None):
    session = MagicMock()
    session.headers = {}
    session.proxies = {}
    if exc is not None:
        session.get.side_effect = exc
    else:
        response = MagicMock()
        response.json.return_value = payload
        if status_error is not None:
            response.raise_for_status.side_effect = status_error
        session.get.return_value = response
    client = YoudaoClient(base_url="https://openapi.example/api", timeout=3, session=session)
    return client, session


class TestSignature:
    """v3 request signature."""

    def test_short_query_used_verbatim(self):
        assert truncate_for_sign("hello") == "hello"
        assert truncate_for_sign("a" * 20) == "a" * 20

    def test_long_query_truncated(self):
        query = "abcdefghij" + "x" * 5 + "0123456789"
        assert truncate_for_sign(query) == "abcdefghij250123456789"

    def test_signature_is_sha256_hex(self):
        expected = hashlib.sha256(b"app-idcatsalt1700000000app-secret").hexdigest()
        assert build_signature("app-id", "cat", "salt", "1700000000", "app-secret") == expected

    def test_build_params(self):
        client, _ = _client_with_response(CAT_RESPONSE)

        params = client.build_params("cat", CREDENTIALS, salt="salt", curtime="1700000000")

        assert params == {
            "q": "cat",
            "from": "auto",
            "to": "auto",
            "appKey": "app-id",
            "salt": "salt",
            "sign": build_signature("app-id", "cat", "salt", "1700000000", "app-secret"),
            "signType": "v3",
            "curtime": "1700000000",
        }

    @pytest.mark.parametrize(
        "credentials",
        [ProviderCredentials("", "secret"), ProviderCredentials("id", ""), ProviderCredentials()],
    )
    def test_missing_credentials(self, credentials):
        client, session = _client_with_response(CAT_RESPONSE)

        with pytest.raises(ConfigurationError):
            client.translate("cat", credentials)
        session.get.assert_not_called()


class TestTranslate:
    """Response mapping and error handling."""

    def test_maps_response_onto_record(self):
        client, session = _client_with_response(CAT_RESPONSE)

        record = client.translate("cat", CREDENTIALS)

        assert record.found is True
        assert record.origin == Origin.remote(RemoteSource.YOUDAO)
        assert record.translations == ["猫", "n. 猫，猫科动物"]
        assert record.pronunciation == "kæt"
        assert record.pronunciation_us == "kæt"
        assert record.pronunciation_uk == "kæt"
        assert record.examples == [("Cat", "猫; 卡特彼勒"), ("Cat Stevens", "凯特·斯蒂文斯")]
        assert session.get.call_args.kwargs["timeout"] == 3

    def test_empty_response_is_not_found(self):
        client, _ = _client_with_response({"errorCode": "0"})

        record = client.translate("qwxz", CREDENTIALS)

        assert record.found is False
        assert record.query == "qwxz"

    def test_null_lists_are_accepted(self):
        client, _ = _client_with_response(
            {
                "errorCode": "0",
                "translation": ["猫"],
                "basic": {"phonetic": "kæt", "explains": None},
                "web": None,
            }
        )

        record = client.translate("cat", CREDENTIALS)

        assert record.found is True
        assert record.translations == ["猫"]
        assert record.examples == []

    def test_null_translation_without_content_is_not_found(self):
        client, _ = _client_with_response({"errorCode": "0", "translation": None})

        assert client.translate("qwxz", CREDENTIALS).found is False

    def test_api_error_code(self):
        client, _ = _client_with_response({"errorCode": "108"})

        with pytest.raises(ProviderError) as exc_info:
            client.translate("cat", CREDENTIALS)

        assert exc_info.value.code == "108"
        assert "Invalid appKey" in str(exc_info.value)

    def test_http_error(self):
        response = MagicMock(status_code=500)
        client, _ = _client_with_response(
            CAT_RESPONSE, status_error=requests.HTTPError("500", response=response)
        )

        with pytest.raises(ProviderError):
            client.translate("cat", CREDENTIALS)

    def test_network_error(self):
        client, _ = _client_with_response(exc=requests.ConnectionError("offline"))

        with pytest.raises(ProviderError) as exc_info:
            client.translate("cat", CREDENTIALS)
        assert exc_info.value.stage == "remote"

    def test_non_json_body(self):
        client, session = _client_with_response(CAT_RESPONSE)
        session.get.return_value.json.side_effect = ValueError("no json")

        with pytest.raises(ProviderError):
            client.translate("cat", CREDENTIALS)

    def test_unexpected_shape(self):
        client, _ = _client_with_response({"translation": ["猫"]})

        with pytest.raises(ProviderError):
            client.translate("cat", CREDENTIALS)


class TestErrorCodes:
    def test_known_and_unknown(self):
        assert describe_error_code("411") == "Access frequency limited"
        assert describe_error_code("999") == "Unknown error"

    def test_response_model_aliases(self):
        parsed = YoudaoResponse.model_validate(CAT_RESPONSE)
        assert parsed.basic.us_phonetic == "kæt"
        assert parsed.web[0].value == ["猫", "卡特彼勒"]


class TestYoudaoProvider:
    @pytest.mark.asyncio
    async def test_fetch_runs_client(self):
        client, _ = _client_with_response(CAT_RESPONSE)
        provider = YoudaoProvider(client=client)

        record = await provider.fetch("cat", CREDENTIALS)

        assert record.found is True
        assert provider.provider_id is RemoteSource.YOUDAO

    @pytest.mark.asyncio
    async def test_fetch_propagates_errors(self):
        client, _ = _client_with_response({"errorCode": "411"})
        provider = YoudaoProvider(client=client)

        with pytest.raises(ProviderError):
            await provider.fetch("cat", CREDENTIALS)
