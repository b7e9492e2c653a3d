"""
Reply decoding.

Replies arrive as the generic shapes a Redis connection produces: ``None``,
bulk strings (``bytes`` or ``str``), integers and (nested) lists. A server
error nested inside an array shows up as an exception instance in that slot.
"""
from typing import Any, Callable, Optional, Sequence

from rsearch_core.errors import DecodeError, MultiError, ServerError
from rsearch_core.types import Document, IndexInfo, SearchResult

from .query import Query
from .schema import (
    Field,
    FieldType,
    IndexOptions,
    NumericFieldOptions,
    Schema,
    TagFieldOptions,
    TextFieldOptions,
)


def to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, BaseException):
        raise DecodeError(f"Unexpected error marker in reply: {value}")
    if value is None:
        raise DecodeError("Unexpected nil in reply")
    return str(value)


def to_int(value: Any) -> int:
    try:
        return int(to_str(value)) if not isinstance(value, int) else value
    except ValueError as e:
        raise DecodeError(f"Expected an integer, got {value!r}") from e


def to_float(value: Any) -> float:
    try:
        return float(to_str(value)) if not isinstance(value, (int, float)) else float(value)
    except ValueError as e:
        raise DecodeError(f"Expected a number, got {value!r}") from e


def _expect_list(reply: Any, what: str) -> list:
    if isinstance(reply, BaseException):
        raise DecodeError(f"Error marker in {what} reply: {reply}")
    if not isinstance(reply, (list, tuple)):
        raise DecodeError(f"Expected an array for {what}, got {type(reply).__name__}")
    return list(reply)


def decode_int(reply: Any) -> int:
    return to_int(reply)


def _decode_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_decode_value(v) for v in value]
    return to_str(value)


def decode_fields(flat: Any) -> dict[str, Any]:
    """
    Flat [name, value, name, value, ...] array to an ordered dict.
    """
    items = _expect_list(flat, "field/value")
    if len(items) % 2 != 0:
        raise DecodeError(f"Odd-length field/value array ({len(items)} elements)")
    fields: dict[str, Any] = {}
    for i in range(0, len(items), 2):
        fields[to_str(items[i])] = _decode_value(items[i + 1])
    return fields


def decode_document(doc_id: str, reply: Any) -> Optional[Document]:
    """
    FT.GET reply. ``None`` means the document does not exist.
    """
    if reply is None:
        return None
    items = _expect_list(reply, "document")
    if len(items) == 2 and isinstance(items[1], (list, tuple)):
        return Document(doc_id, to_float(items[0]), None, decode_fields(items[1]))
    return Document(doc_id, 1.0, None, decode_fields(items))


def decode_documents(ids: Sequence[str], reply: Any) -> list[Optional[Document]]:
    """
    FT.MGET reply, aligned positionally with ``ids``.

    Missing documents stay ``None`` in place. Slots the server answered with
    an error are collected into a ``MultiError`` whose ``results`` hold the
    documents that did decode.
    """
    items = _expect_list(reply, "multi-get")
    if len(items) != len(ids):
        raise DecodeError(f"Multi-get returned {len(items)} replies for {len(ids)} ids")

    docs: list[Optional[Document]] = [None] * len(ids)
    merr: Optional[MultiError] = None
    for i, (doc_id, item) in enumerate(zip(ids, items)):
        if isinstance(item, BaseException):
            if merr is None:
                merr = MultiError(len(ids))
            merr[i] = item if isinstance(item, ServerError) else ServerError(str(item))
            continue
        docs[i] = decode_document(doc_id, item)

    if merr is not None:
        merr.results = docs
        raise merr
    return docs


def decode_search(reply: Any, query: Query) -> SearchResult:
    """
    FT.SEARCH reply: [total, id, (score), (payload), (fields), id, ...].

    The row stride depends on which flags and RETURN clause the query sent.
    """
    items = _expect_list(reply, "search")
    if not items:
        raise DecodeError("Empty search reply")
    total = to_int(items[0])

    # RETURN 0 gets id-only rows, same as NOCONTENT
    no_content = query.no_content or query.return_fields == []

    stride = 1
    if query.with_scores:
        stride += 1
    if query.with_payloads:
        stride += 1
    if not no_content:
        stride += 1

    rows = items[1:]
    if len(rows) % stride != 0:
        raise DecodeError(f"Search reply of {len(rows)} elements does not split into rows of {stride}")

    docs: list[Document] = []
    for i in range(0, len(rows), stride):
        pos = i
        doc = Document(to_str(rows[pos]))
        pos += 1
        if query.with_scores:
            doc.score = to_float(rows[pos])
            pos += 1
        if query.with_payloads:
            payload = rows[pos]
            if payload is not None:
                doc.payload = payload if isinstance(payload, bytes) else to_str(payload).encode()
            pos += 1
        if not no_content:
            if rows[pos] is not None:
                doc.fields = decode_fields(rows[pos])
        docs.append(doc)
    return SearchResult(total=total, documents=docs)


def decode_aggregate(reply: Any, with_cursor: bool) -> tuple[int, list[dict[str, Any]], int]:
    """
    FT.AGGREGATE / FT.CURSOR READ reply.

    Without a cursor: [total, row, row, ...].
    With a cursor:    [[total, row, row, ...], cursor_id].
    Returns (total, rows, cursor_id); cursor_id is 0 without a cursor.
    """
    items = _expect_list(reply, "aggregate")
    cursor_id = 0
    if with_cursor:
        if len(items) != 2:
            raise DecodeError(f"Cursor reply must have 2 elements, got {len(items)}")
        cursor_id = to_int(items[1])
        items = _expect_list(items[0], "aggregate")
    if not items:
        raise DecodeError("Empty aggregate reply")
    total = to_int(items[0])
    rows = [decode_fields(row) for row in items[1:]]
    return total, rows, cursor_id


def decode_terms(reply: Any) -> list[str]:
    if reply is None:
        return []
    return [to_str(term) for term in _expect_list(reply, "dictionary")]


# ----------------------------
# FT.INFO
# ----------------------------

# Reply key -> (IndexInfo attribute, converter)
INFO_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "index_name": ("name", to_str),
    "num_docs": ("doc_count", to_int),
    "num_records": ("record_count", lambda v: int(to_float(v))),
    "num_terms": ("term_count", to_int),
    "max_doc_id": ("max_doc_id", to_int),
    "inverted_sz_mb": ("inverted_index_size_mb", to_float),
    "offset_vector_sz_mb": ("offset_vector_size_mb", to_float),
    "doc_table_size_mb": ("doc_table_size_mb", to_float),
    "key_table_size_mb": ("key_table_size_mb", to_float),
    "records_per_doc_avg": ("records_per_doc_avg", to_float),
    "bytes_per_record_avg": ("bytes_per_record_avg", to_float),
    "offsets_per_term_avg": ("offsets_per_term_avg", to_float),
    "offset_bits_per_record_avg": ("offset_bits_per_term_avg", to_float),
}

_INDEX_OPTION_FLAGS = {
    "NOFIELDS": "no_field_flags",
    "NOFREQS": "no_frequencies",
    "NOOFFSETS": "no_offset_vectors",
}


def _decode_field_spec(spec: Any) -> Field:
    """
    Either [name, "type", TYPE, OPTION...] or the newer
    ["identifier", id, "attribute", name, "type", TYPE, OPTION...].
    """
    tokens = [to_str(t) if not isinstance(t, list) else t for t in _expect_list(spec, "field spec")]
    if tokens and tokens[0] == "identifier":
        tokens = tokens[3:]
    if len(tokens) < 3:
        raise DecodeError(f"Field spec too short: {tokens!r}")
    name = tokens[0]
    try:
        ftype = FieldType(str(tokens[2]).upper())
    except ValueError as e:
        raise DecodeError(f"Unknown field type {tokens[2]!r}") from e

    rest = tokens[3:]
    opts = ["" if isinstance(t, list) else str(t).upper() for t in rest]
    sortable = "SORTABLE" in opts
    no_index = "NOINDEX" in opts
    if ftype is FieldType.TEXT:
        weight = 1.0
        if "WEIGHT" in opts[:-1]:
            weight = to_float(opts[opts.index("WEIGHT") + 1])
        options = TextFieldOptions(weight=weight, no_stem="NOSTEM" in opts, sortable=sortable, no_index=no_index)
    elif ftype is FieldType.NUMERIC:
        options = NumericFieldOptions(sortable=sortable, no_index=no_index)
    else:
        separator = ""
        if "SEPARATOR" in opts[:-1]:
            separator = str(rest[opts.index("SEPARATOR") + 1])
        options = TagFieldOptions(separator=separator, sortable=sortable, no_index=no_index)
    return Field(name, ftype, options)


def _decode_schema(field_specs: Any, index_options: Any, stopwords: Any) -> Schema:
    flags = {}
    for opt in _expect_list(index_options or [], "index options"):
        attr = _INDEX_OPTION_FLAGS.get(to_str(opt).upper())
        if attr:
            flags[attr] = True
    words = None if stopwords is None else [to_str(w) for w in _expect_list(stopwords, "stopwords")]
    schema = Schema(IndexOptions(stopwords=words, **flags))
    for spec in _expect_list(field_specs, "fields"):
        schema.add_field(_decode_field_spec(spec))
    return schema


def decode_info(reply: Any) -> IndexInfo:
    """
    FT.INFO reply: flat key/value array. Unknown keys are ignored.
    """
    items = _expect_list(reply, "info")
    if len(items) % 2 != 0:
        raise DecodeError(f"Odd-length info reply ({len(items)} elements)")

    info = IndexInfo()
    raw: dict[str, Any] = {}
    for i in range(0, len(items), 2):
        key = to_str(items[i])
        raw[key] = items[i + 1]
        entry = INFO_FIELDS.get(key)
        if entry is None:
            continue
        attr, convert = entry
        setattr(info, attr, convert(items[i + 1]))

    field_specs = raw.get("attributes", raw.get("fields"))
    if field_specs is not None:
        info.schema = _decode_schema(field_specs, raw.get("index_options"), raw.get("stopwords_list"))
    return info
