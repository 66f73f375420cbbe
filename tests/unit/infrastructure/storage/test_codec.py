"""Tests for the zstd record codec."""

import json

import pytest
import zstandard

from lexicon_hub.domain.lookup.models import Origin, RemoteSource, RichEntry
from lexicon_hub.exceptions import CorruptRecord
from lexicon_hub.infrastructure.storage.codec import RecordCodec


class TestRecordCodec:
    """Encode/decode behaviour of RecordCodec."""

    def test_round_trip_preserves_every_field(self, make_record):
        record = make_record(
            query="serendipity",
            is_long_text=True,
            pronunciation="ˌserənˈdɪpəti",
            pronunciation_us="ˌserənˈdɪpəti",
            pronunciation_uk="ˌserənˈdɪpɪti",
            translations=["n. 意外发现珍奇事物的本领"],
            examples=[("pure serendipity", "纯属巧合")],
            rich_entries=[
                RichEntry(
                    annotation="N-UNCOUNT",
                    primary_translation="机缘凑巧",
                    examples=[("It was serendipity.", "这是机缘巧合。")],
                )
            ],
            rank_label="TEM8",
            origin=Origin.remote(RemoteSource.GOOGLE),
            cached_at=1700000000,
        )
        codec = RecordCodec()

        encoded = codec.encode(record)

        assert codec.decode(encoded.data) == record

    def test_size_accounting(self, make_record):
        record = make_record(translations=["n. 猫"] * 50)
        encoded = RecordCodec().encode(record)

        raw = record.model_dump_json(by_alias=True).encode("utf-8")
        assert encoded.original_size == len(raw)
        assert encoded.compressed_size == len(encoded.data)
        assert encoded.compressed_size < encoded.original_size

    def test_decodes_frames_without_content_size(self, make_record):
        record = make_record()
        raw = record.model_dump_json(by_alias=True).encode("utf-8")
        compressor = zstandard.ZstdCompressor(write_content_size=False)
        chunker = compressor.compressobj()
        data = chunker.compress(raw) + chunker.flush()

        assert RecordCodec().decode(data) == record

    def test_decodes_documents_from_older_writers(self):
        document = {
            "query": "cat",
            "found": True,
            "is_long_text": False,
            "pronunciation": None,
            "pronunciation_us": None,
            "pronunciation_uk": None,
            "translations": ["n. 猫"],
            "examples": [],
            "collins_items": [],
            "collins_rank": None,
            "source": "OfflineDb",
            "cached_at": None,
        }
        data = zstandard.ZstdCompressor().compress(json.dumps(document).encode())

        record = RecordCodec().decode(data)

        assert record.translations == ["n. 猫"]
        assert record.origin == Origin.persistent_store()

    def test_garbage_bytes_raise_corrupt_record(self):
        with pytest.raises(CorruptRecord):
            RecordCodec().decode(b"\x00\x01 not zstd")

    def test_invalid_json_raises_corrupt_record(self):
        data = zstandard.ZstdCompressor().compress(b'{"found": true')
        with pytest.raises(CorruptRecord):
            RecordCodec().decode(data)

    def test_missing_query_raises_corrupt_record(self):
        data = zstandard.ZstdCompressor().compress(b'{"found": true}')
        with pytest.raises(CorruptRecord) as exc_info:
            RecordCodec().decode(data)
        assert exc_info.value.stage == "store"
