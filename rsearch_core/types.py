from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Document:
    """
    A single indexed document.
    Fields keep the order they were set in.
    """
    id: str
    score: float = 1.0
    payload: Optional[bytes] = None
    fields: dict[str, Any] = field(default_factory=dict)

    def set(self, name: str, value: Any) -> "Document":
        self.fields[name] = value
        return self

    def set_payload(self, payload: bytes) -> "Document":
        self.payload = payload
        return self


@dataclass(frozen=True)
class SearchResult:
    """
    Documents matched by a search, plus the server-side total.
    """
    total: int
    documents: list[Document]


@dataclass
class IndexInfo:
    """
    Index statistics as reported by the server.
    Sizes are in megabytes.
    """
    name: str = ""
    schema: Any = None
    doc_count: int = 0
    record_count: int = 0
    term_count: int = 0
    max_doc_id: int = 0
    inverted_index_size_mb: float = 0.0
    offset_vector_size_mb: float = 0.0
    doc_table_size_mb: float = 0.0
    key_table_size_mb: float = 0.0
    records_per_doc_avg: float = 0.0
    bytes_per_record_avg: float = 0.0
    offsets_per_term_avg: float = 0.0
    offset_bits_per_term_avg: float = 0.0
