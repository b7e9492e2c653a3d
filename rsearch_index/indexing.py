from dataclasses import dataclass
from typing import Any, Optional

from rsearch_core.types import Document


@dataclass
class IndexingOptions:
    """
    Options altering how FT.ADD stores a document.

    ``partial`` only updates the given fields and implies ``replace``.
    ``replace_condition`` is an expression evaluated against the existing
    document; the update only happens when it holds.
    """
    no_save: bool = False
    language: str = ""
    replace: bool = False
    partial: bool = False
    replace_condition: str = ""

    def __post_init__(self) -> None:
        if self.partial:
            self.replace = True

    def args(self) -> list[Any]:
        args: list[Any] = []
        if self.no_save:
            args.append("NOSAVE")
        if self.language:
            args += ["LANGUAGE", self.language]
        if self.replace or self.partial:
            args.append("REPLACE")
            if self.partial:
                args.append("PARTIAL")
            if self.replace_condition:
                args += ["IF", self.replace_condition]
        return args


DEFAULT_INDEXING_OPTIONS = IndexingOptions()


def add_document_args(index_name: str, doc: Document, options: Optional[IndexingOptions] = None) -> list[Any]:
    opts = options or DEFAULT_INDEXING_OPTIONS
    args: list[Any] = [index_name, doc.id, doc.score]
    args += opts.args()
    if doc.payload is not None:
        args += ["PAYLOAD", doc.payload]
    args.append("FIELDS")
    for name, value in doc.fields.items():
        args += [name, value]
    return args
