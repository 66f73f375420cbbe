"""
Legacy dictionary record shape and its conversion to LookupRecord.

Legacy rows were written by an older release with short JSON keys
(k, pron, para, eg, co). Every field is optional; unknown keys are ignored.
Pronunciation labels appear in two conventions: Chinese (美, 英) and
English (us, uk).
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from lexicon_hub.domain.lookup.models import LookupRecord, Origin, RichEntry

UNKNOWN_KEYWORD = "unknown"

# Label lookup order per pronunciation slot: first match wins
US_LABELS: Tuple[str, ...] = ("美", "us")
UK_LABELS: Tuple[str, ...] = ("英", "uk")


class LegacyCollinsItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    additional: Optional[str] = Field(default=None, alias="a")
    major_trans: Optional[str] = Field(default=None, alias="maj")
    examples: Optional[List[List[str]]] = Field(default=None, alias="eg")


class LegacyCollins(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: Optional[List[LegacyCollinsItem]] = Field(default=None, alias="li")
    star: Optional[int] = None
    rank: Optional[str] = None
    additional_pattern: Optional[str] = Field(default=None, alias="pat")


class LegacyRecord(BaseModel):
    """Foreign record shape consumed only by the migration pipeline."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keyword: Optional[str] = Field(default=None, alias="k")
    pronounce: Optional[Dict[str, str]] = Field(default=None, alias="pron")
    paraphrase: Optional[List[str]] = Field(default=None, alias="para")
    examples: Optional[Dict[str, List[List[str]]]] = Field(default=None, alias="eg")
    collins: Optional[LegacyCollins] = Field(default=None, alias="co")


def flatten_pairs(pairs: Optional[Iterable[Sequence[str]]]) -> List[Tuple[str, str]]:
    """Keep the first two elements of each pair; shorter pairs are dropped."""
    if not pairs:
        return []
    return [(pair[0], pair[1]) for pair in pairs if len(pair) >= 2]


def _first_label(pron: Dict[str, str], labels: Sequence[str]) -> Optional[str]:
    for label in labels:
        if label in pron:
            return pron[label]
    return None


def convert_legacy(legacy: LegacyRecord) -> LookupRecord:
    """
    Convert a legacy record into the current shape.

    The result is always found=True and labelled as PersistentStore origin.
    """
    record = LookupRecord(
        query=legacy.keyword or UNKNOWN_KEYWORD,
        found=True,
        origin=Origin.persistent_store(),
    )

    if legacy.pronounce:
        us = _first_label(legacy.pronounce, US_LABELS)
        uk = _first_label(legacy.pronounce, UK_LABELS)
        record.pronunciation_us = us
        record.pronunciation_uk = uk
        record.pronunciation = us if us is not None else uk

    if legacy.paraphrase:
        record.translations = list(legacy.paraphrase)

    if legacy.examples:
        for pairs in legacy.examples.values():
            record.examples.extend(flatten_pairs(pairs))

    if legacy.collins is not None:
        record.rank_label = legacy.collins.rank
        for item in legacy.collins.items or []:
            entry = RichEntry(
                annotation=item.additional,
                primary_translation=item.major_trans,
                examples=flatten_pairs(item.examples),
            )
            # An entry with a primary translation or at least one example is kept
            if entry.primary_translation is not None or entry.examples:
                record.rich_entries.append(entry)

    return record
