"""Document mapping: which fields an index stores and how they are analyzed."""

import json
from dataclasses import dataclass
from typing import Literal

from gnosis.core.config.index_config import IndexSection
from gnosis.core.exceptions import MappingError

FieldKind = Literal["text", "datetime"]

# Analyzer identifier -> DuckDB fts stemmer
ANALYZER_STEMMERS: dict[str, str] = {
    "ar": "arabic",
    "eu": "basque",
    "ca": "catalan",
    "da": "danish",
    "nl": "dutch",
    "en": "english",
    "fi": "finnish",
    "fr": "french",
    "de": "german",
    "el": "greek",
    "hi": "hindi",
    "hu": "hungarian",
    "id": "indonesian",
    "ga": "irish",
    "it": "italian",
    "lt": "lithuanian",
    "ne": "nepali",
    "no": "norwegian",
    "pt": "portuguese",
    "ro": "romanian",
    "ru": "russian",
    "sr": "serbian",
    "es": "spanish",
    "sv": "swedish",
    "ta": "tamil",
    "tr": "turkish",
    "porter": "porter",
    "standard": "none",
    "none": "none",
}


@dataclass(frozen=True)
class FieldMapping:
    """One stored field of a document."""

    name: str
    kind: FieldKind
    analyzer: str | None = None

    @property
    def column_type(self) -> str:
        return "TIMESTAMP" if self.kind == "datetime" else "TEXT"


@dataclass(frozen=True)
class IndexMapping:
    """Schema of an index: its document type, analyzer and fields."""

    document_type: str
    analyzer: str
    fields: tuple[FieldMapping, ...]

    @property
    def stemmer(self) -> str:
        return ANALYZER_STEMMERS[self.analyzer]

    @property
    def text_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.kind == "text"]

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def to_json(self) -> str:
        return json.dumps(
            {
                "document_type": self.document_type,
                "analyzer": self.analyzer,
                "fields": [
                    {"name": f.name, "kind": f.kind, "analyzer": f.analyzer}
                    for f in self.fields
                ],
            },
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, data: str) -> "IndexMapping":
        """Restore a mapping stored with :meth:`to_json`.

        Raises:
            MappingError: If the stored mapping is unreadable or names an
                unsupported analyzer
        """
        try:
            raw = json.loads(data)
            if raw["analyzer"] not in ANALYZER_STEMMERS:
                raise MappingError(
                    f"Stored index mapping uses unsupported analyzer '{raw['analyzer']}'"
                )
            return cls(
                document_type=raw["document_type"],
                analyzer=raw["analyzer"],
                fields=tuple(
                    FieldMapping(name=f["name"], kind=f["kind"], analyzer=f.get("analyzer"))
                    for f in raw["fields"]
                ),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise MappingError(f"Stored index mapping is unreadable: {e}") from e


def build_index_mapping(section: IndexSection) -> IndexMapping:
    """Build the page mapping for *section*.

    Text fields are analyzed with the section's analyzer; ``modified`` is the
    single date-time field.

    Raises:
        MappingError: If the configured analyzer is not supported
    """
    analyzer = section.index_type.lower()
    if analyzer not in ANALYZER_STEMMERS:
        supported = ", ".join(sorted(ANALYZER_STEMMERS))
        raise MappingError(
            f"Unsupported analyzer '{section.index_type}' for index "
            f"{section.index_name}. Supported analyzers: {supported}"
        )

    text_fields = ("id", "path", "title", "body", "topics", "keywords")
    fields = tuple(FieldMapping(name, "text", analyzer) for name in text_fields)
    fields += (FieldMapping("modified", "datetime"),)

    return IndexMapping(document_type=section.index_name, analyzer=analyzer, fields=fields)
