"""Tests for lookup records, origin tags and provenance relabeling."""

import json

import pytest

from lexicon_hub.domain.lookup.models import (
    LookupRecord,
    Origin,
    OriginKind,
    RemoteSource,
    RichEntry,
)
from lexicon_hub.domain.lookup.normalizer import normalize_query
from lexicon_hub.domain.lookup.provenance import (
    served_from_cache,
    served_from_store,
    stamped_for_write,
)


class TestOriginWireFormat:
    """Origin is persisted as an externally tagged value."""

    @pytest.mark.parametrize(
        "origin, wire",
        [
            (Origin.persistent_store(), "OfflineDb"),
            (Origin.process_cache(), "LocalCache"),
            (Origin.remote(RemoteSource.YOUDAO), {"Online": "Youdao"}),
            (Origin.remote(RemoteSource.GOOGLE), {"Online": "Google"}),
        ],
    )
    def test_to_wire(self, origin, wire):
        assert origin.to_wire() == wire
        assert Origin.from_wire(wire) == origin

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValueError):
            Origin.from_wire({"Offline": "Youdao"})

    def test_bare_online_defaults_to_youdao(self):
        assert Origin.from_wire("Online") == Origin.remote(RemoteSource.YOUDAO)


class TestLookupRecordSerialization:
    """Persisted JSON keys stay compatible with existing databases."""

    def test_dump_uses_persisted_keys(self, make_record):
        record = make_record(
            rich_entries=[RichEntry(annotation="N-COUNT", primary_translation="猫")],
            rank_label="CET4",
            cached_at=1700000000,
        )

        data = json.loads(record.model_dump_json(by_alias=True))

        assert data["collins_items"][0] == {
            "additional": "N-COUNT",
            "major_trans": "猫",
            "examples": [],
        }
        assert data["collins_rank"] == "CET4"
        assert data["source"] == {"Online": "Youdao"}
        assert data["cached_at"] == 1700000000
        assert "rich_entries" not in data

    def test_missing_keys_take_defaults(self):
        record = LookupRecord.model_validate_json('{"query": "cat"}')

        assert record.found is False
        assert record.is_long_text is False
        assert record.translations == []
        assert record.examples == []
        assert record.rich_entries == []
        assert record.origin == Origin.remote(RemoteSource.YOUDAO)

    def test_examples_parse_as_pairs(self):
        record = LookupRecord.model_validate_json(
            '{"query": "cat", "examples": [["a cat", "一只猫"]], "source": "OfflineDb"}'
        )

        assert record.examples == [("a cat", "一只猫")]
        assert record.origin.kind is OriginKind.PERSISTENT_STORE

    def test_has_content(self):
        assert LookupRecord(query="x", pronunciation_uk="æ").has_content
        assert not LookupRecord.not_found("x").has_content


class TestProvenance:
    """Relabeling returns copies and follows the store tie-break rule."""

    def test_served_from_cache(self, make_record):
        record = make_record()
        relabeled = served_from_cache(record)

        assert relabeled.origin == Origin.process_cache()
        assert record.origin == Origin.remote(RemoteSource.YOUDAO)
        assert relabeled.translations == record.translations

    def test_store_keeps_remote_origin(self, make_record):
        record = make_record(origin=Origin.remote(RemoteSource.BING))
        assert served_from_store(record).origin == Origin.remote(RemoteSource.BING)

    @pytest.mark.parametrize("origin", [Origin.persistent_store(), Origin.process_cache()])
    def test_store_normalizes_other_origins(self, make_record, origin):
        record = make_record(origin=origin)
        assert served_from_store(record).origin == Origin.persistent_store()

    def test_relabel_does_not_share_lists(self, make_record):
        record = make_record()
        relabeled = served_from_cache(record)
        relabeled.translations.append("extra")
        assert record.translations == ["n. 猫"]

    def test_stamped_for_write(self, make_record):
        record = make_record()
        stamped = stamped_for_write(record, 1234)
        assert stamped.cached_at == 1234
        assert record.cached_at is None


class TestNormalizeQuery:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("cat", "cat"),
            ("  cat  ", "cat"),
            ("hello   world", "hello world"),
            ("\thello\nworld ", "hello world"),
            (["hello", " world "], "hello world"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_query(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", [], ["", " "]])
    def test_empty_rejected(self, raw):
        with pytest.raises(ValueError):
            normalize_query(raw)
