"""Translation records and their composite identity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, NamedTuple, Sequence, Tuple


class RowKey(NamedTuple):
    """Composite ``(category, key)`` identity of a translation entry."""

    category: str
    key: str

    def __str__(self) -> str:
        return f"{self.category}|{self.key}"


@dataclass(slots=True)
class TranslationRecord:
    category: str
    key: str
    values: Dict[str, str] = field(default_factory=dict)

    @property
    def identity(self) -> RowKey:
        return RowKey(self.category, self.key)

    def value(self, lang: str) -> str:
        return self.values.get(lang, "") or ""

    def ordered_values(self, langs: Sequence[str]) -> Tuple[str, ...]:
        """Return the values for ``langs`` in that order, blanks for missing ones."""

        return tuple(self.value(lang) for lang in langs)

    def to_json(self, langs: Sequence[str]) -> Dict[str, str]:
        payload: Dict[str, str] = {"cate": self.category, "key": self.key}
        for lang in langs:
            payload[lang] = self.value(lang)
        return payload


def index_records(records: Sequence[TranslationRecord]) -> Dict[RowKey, TranslationRecord]:
    """Map records by identity. Later duplicates replace earlier ones."""

    index: Dict[RowKey, TranslationRecord] = {}
    for record in records:
        index[record.identity] = record
    return index


def coerce_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def record_from_mapping(payload: Mapping[str, object], langs: Sequence[str]) -> TranslationRecord:
    values = {lang: coerce_text(payload.get(lang)) for lang in langs}
    return TranslationRecord(
        category=coerce_text(payload.get("cate")),
        key=coerce_text(payload.get("key")),
        values=values,
    )


__all__ = [
    "RowKey",
    "TranslationRecord",
    "coerce_text",
    "index_records",
    "record_from_mapping",
]
