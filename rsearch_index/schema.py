from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence, Union

from rsearch_core.errors import BuildError


class FieldType(str, Enum):
    TEXT = "TEXT"
    NUMERIC = "NUMERIC"
    TAG = "TAG"


@dataclass(frozen=True)
class TextFieldOptions:
    weight: float = 1.0
    no_stem: bool = False
    sortable: bool = False
    no_index: bool = False


@dataclass(frozen=True)
class NumericFieldOptions:
    sortable: bool = False
    no_index: bool = False


@dataclass(frozen=True)
class TagFieldOptions:
    separator: str = ""
    sortable: bool = False
    no_index: bool = False

    def __post_init__(self) -> None:
        if len(self.separator) > 1:
            raise BuildError("tag separator must be a single character")


FieldOptions = Union[TextFieldOptions, NumericFieldOptions, TagFieldOptions]


@dataclass(frozen=True)
class Field:
    name: str
    type: FieldType
    options: Optional[FieldOptions] = None

    def args(self) -> list[Any]:
        builder = _FIELD_BUILDERS.get(self.type)
        if builder is None:
            raise BuildError(f"Unsupported field type {self.type!r}")
        options_cls, emit = builder
        args: list[Any] = [self.name, FieldType(self.type).value]
        if self.options is None:
            return args
        if not isinstance(self.options, options_cls):
            raise BuildError(
                f"Invalid options for {FieldType(self.type).value} field {self.name!r}: "
                f"{type(self.options).__name__}"
            )
        return args + emit(self.options)


def _text_args(opts: TextFieldOptions) -> list[Any]:
    args: list[Any] = []
    if opts.weight not in (0, 1):
        args += ["WEIGHT", opts.weight]
    if opts.no_stem:
        args.append("NOSTEM")
    if opts.sortable:
        args.append("SORTABLE")
    if opts.no_index:
        args.append("NOINDEX")
    return args


def _numeric_args(opts: NumericFieldOptions) -> list[Any]:
    args: list[Any] = []
    if opts.sortable:
        args.append("SORTABLE")
    if opts.no_index:
        args.append("NOINDEX")
    return args


def _tag_args(opts: TagFieldOptions) -> list[Any]:
    args: list[Any] = []
    if opts.separator:
        args += ["SEPARATOR", opts.separator]
    if opts.sortable:
        args.append("SORTABLE")
    if opts.no_index:
        args.append("NOINDEX")
    return args


_FIELD_BUILDERS = {
    FieldType.TEXT: (TextFieldOptions, _text_args),
    FieldType.NUMERIC: (NumericFieldOptions, _numeric_args),
    FieldType.TAG: (TagFieldOptions, _tag_args),
}


def text_field(name: str, weight: float = 1.0, no_stem: bool = False) -> Field:
    return Field(name, FieldType.TEXT, TextFieldOptions(weight=weight, no_stem=no_stem))


def sortable_text_field(name: str, weight: float = 1.0) -> Field:
    return Field(name, FieldType.TEXT, TextFieldOptions(weight=weight, sortable=True))


def numeric_field(name: str) -> Field:
    return Field(name, FieldType.NUMERIC)


def sortable_numeric_field(name: str) -> Field:
    return Field(name, FieldType.NUMERIC, NumericFieldOptions(sortable=True))


def tag_field(name: str, separator: str = "") -> Field:
    return Field(name, FieldType.TAG, TagFieldOptions(separator=separator))


@dataclass(frozen=True)
class IndexOptions:
    """
    Global index options. ``stopwords=[]`` disables stopwords entirely,
    ``None`` keeps the server's default list.
    """
    no_field_flags: bool = False
    no_frequencies: bool = False
    no_offset_vectors: bool = False
    stopwords: Optional[Sequence[str]] = None

    def args(self) -> list[Any]:
        args: list[Any] = []
        if self.no_field_flags:
            args.append("NOFIELDS")
        if self.no_frequencies:
            args.append("NOFREQS")
        if self.no_offset_vectors:
            args.append("NOOFFSETS")
        if self.stopwords is not None:
            args += ["STOPWORDS", len(self.stopwords), *self.stopwords]
        return args


DEFAULT_INDEX_OPTIONS = IndexOptions()


@dataclass
class Schema:
    """
    Ordered field list. Declaration order becomes column order on the server.
    """
    options: IndexOptions = DEFAULT_INDEX_OPTIONS
    fields: list[Field] = field(default_factory=list)

    def add_field(self, f: Field) -> "Schema":
        self.fields.append(f)
        return self

    def get_field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def args(self) -> list[Any]:
        args = self.options.args()
        args.append("SCHEMA")
        for f in self.fields:
            args += f.args()
        return args
