"""
Lookup domain models.

LookupRecord is the canonical result of a query. Its JSON form is also the
persisted form, so the aliases below are an on-disk compatibility contract
with databases written by earlier releases.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class OriginKind(str, Enum):
    """Which tier produced a record instance; values are the wire tags."""

    PERSISTENT_STORE = "OfflineDb"
    PROCESS_CACHE = "LocalCache"
    REMOTE = "Online"


class RemoteSource(str, Enum):
    """Remote providers a record may originate from."""

    YOUDAO = "Youdao"
    BING = "Bing"
    GOOGLE = "Google"


@dataclass(frozen=True)
class Origin:
    """
    Provenance tag of a record.

    Attributes:
        kind: Tier that answered the request.
        provider: Remote provider, only set when kind is REMOTE.
    """

    kind: OriginKind
    provider: Optional[RemoteSource] = None

    @classmethod
    def persistent_store(cls) -> "Origin":
        return cls(OriginKind.PERSISTENT_STORE)

    @classmethod
    def process_cache(cls) -> "Origin":
        return cls(OriginKind.PROCESS_CACHE)

    @classmethod
    def remote(cls, provider: RemoteSource = RemoteSource.YOUDAO) -> "Origin":
        return cls(OriginKind.REMOTE, provider)

    @property
    def is_remote(self) -> bool:
        return self.kind is OriginKind.REMOTE

    def to_wire(self) -> Any:
        """Externally tagged form: "OfflineDb", "LocalCache" or {"Online": "Youdao"}."""
        if self.is_remote:
            provider = self.provider or RemoteSource.YOUDAO
            return {OriginKind.REMOTE.value: provider.value}
        return self.kind.value

    @classmethod
    def from_wire(cls, value: Any) -> "Origin":
        if isinstance(value, Origin):
            return value
        if isinstance(value, str):
            if value == OriginKind.REMOTE.value:
                return cls.remote()
            return cls(OriginKind(value))
        if isinstance(value, dict) and len(value) == 1:
            tag, provider = next(iter(value.items()))
            if tag == OriginKind.REMOTE.value:
                return cls.remote(RemoteSource(provider))
        raise ValueError(f"unrecognized origin tag: {value!r}")

    def label(self) -> str:
        if self.is_remote:
            provider = self.provider or RemoteSource.YOUDAO
            return f"online:{provider.value.lower()}"
        if self.kind is OriginKind.PROCESS_CACHE:
            return "cache"
        return "offline"


Example = Tuple[str, str]


class RichEntry(BaseModel):
    """Structured dictionary entry (usage tag, main sense, examples)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    annotation: Optional[str] = Field(default=None, alias="additional")
    primary_translation: Optional[str] = Field(default=None, alias="major_trans")
    examples: List[Example] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.primary_translation and not self.examples


class LookupRecord(BaseModel):
    """
    Result of looking up one query.

    pronunciation is the single backward-compatible pronunciation;
    pronunciation_us and pronunciation_uk are the two regional variants.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    query: str
    found: bool = False
    is_long_text: bool = False
    pronunciation: Optional[str] = None
    pronunciation_us: Optional[str] = None
    pronunciation_uk: Optional[str] = None
    translations: List[str] = Field(default_factory=list)
    examples: List[Example] = Field(default_factory=list)
    rich_entries: List[RichEntry] = Field(
        default_factory=list, alias="collins_items"
    )
    rank_label: Optional[str] = Field(default=None, alias="collins_rank")
    origin: Origin = Field(default_factory=Origin.remote, alias="source")
    cached_at: Optional[int] = None

    @field_validator("origin", mode="plain")
    @classmethod
    def _parse_origin(cls, value: Any) -> Origin:
        return Origin.from_wire(value)

    @field_serializer("origin")
    def _dump_origin(self, origin: Origin) -> Any:
        return origin.to_wire()

    @classmethod
    def not_found(
        cls,
        query: str,
        *,
        is_long_text: bool = False,
        origin: Optional[Origin] = None,
    ) -> "LookupRecord":
        return cls(
            query=query,
            found=False,
            is_long_text=is_long_text,
            origin=origin or Origin.remote(),
        )

    @property
    def has_content(self) -> bool:
        return bool(
            self.translations
            or self.examples
            or self.rich_entries
            or self.pronunciation
            or self.pronunciation_us
            or self.pronunciation_uk
        )
