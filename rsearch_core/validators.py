from typing import Sequence

from .errors import BuildError
from .types import Document


def validate_terms(terms: Sequence[str]) -> None:
    if not terms:
        raise BuildError("Empty term list")

    if not all(isinstance(t, str) and t for t in terms):
        raise BuildError("Terms must be non-empty strings")


def validate_document(doc: Document) -> None:
    if not isinstance(doc.id, str) or not doc.id:
        raise BuildError("Document id must be a non-empty string")

    for name in doc.fields:
        if not isinstance(name, str) or not name:
            raise BuildError("Field names must be non-empty strings")


def validate_ids(ids: Sequence[str]) -> None:
    if not ids:
        raise BuildError("Empty id list")

    for doc_id in ids:
        if not isinstance(doc_id, str) or not doc_id:
            raise BuildError("Document ids must be non-empty strings")
