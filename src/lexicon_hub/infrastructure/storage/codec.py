"""
Record codec: LookupRecord <-> compressed bytes.

Records are serialized to JSON (using the persisted aliases) and compressed
with Zstandard. Decoding uses a streaming decompressor so frames written
without an embedded content size are accepted too.
"""

from dataclasses import dataclass

import zstandard
from pydantic import ValidationError

from lexicon_hub.domain.lookup.models import LookupRecord
from lexicon_hub.exceptions import CorruptRecord, StoreError

DEFAULT_COMPRESSION_LEVEL = 3


@dataclass(frozen=True)
class EncodedRecord:
    """
    Compressed record payload plus its size accounting.

    Attributes:
        data: Zstandard-compressed JSON document.
        compressed_size: len(data).
        original_size: Size of the JSON document before compression.
    """

    data: bytes
    compressed_size: int
    original_size: int


class RecordCodec:
    """Serialize and compress lookup records for the persistent store."""

    def __init__(self, level: int = DEFAULT_COMPRESSION_LEVEL) -> None:
        self.level = level

    def encode(self, record: LookupRecord) -> EncodedRecord:
        try:
            raw = record.model_dump_json(by_alias=True).encode("utf-8")
            data = zstandard.ZstdCompressor(level=self.level).compress(raw)
        except (ValueError, TypeError, zstandard.ZstdError) as e:
            raise StoreError(
                f"Failed to encode record for query '{record.query}'",
                original_error=e,
            ) from e
        return EncodedRecord(
            data=data, compressed_size=len(data), original_size=len(raw)
        )

    def decode(self, data: bytes) -> LookupRecord:
        """
        Decompress and parse a stored payload.

        Raises:
            CorruptRecord: If decompression or parsing fails.
        """
        try:
            raw = zstandard.ZstdDecompressor().decompressobj().decompress(bytes(data))
        except zstandard.ZstdError as e:
            raise CorruptRecord("Stored payload is not a valid zstd frame", original_error=e) from e

        try:
            return LookupRecord.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptRecord(
                f"Stored payload failed validation ({e.error_count()} errors)",
                original_error=e,
            ) from e
