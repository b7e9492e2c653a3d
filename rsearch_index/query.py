from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from rsearch_core.errors import BuildError

DEFAULT_OFFSET = 0
DEFAULT_NUM = 10

# Canonical emission order for query flags. The server parses the option
# section positionally, so this order is part of the wire contract.
FLAG_TOKENS: tuple[tuple[str, str], ...] = (
    ("verbatim", "VERBATIM"),
    ("no_content", "NOCONTENT"),
    ("in_order", "INORDER"),
    ("with_payloads", "WITHPAYLOADS"),
    ("with_scores", "WITHSCORES"),
)


def _counted(keyword: str, items: Sequence[Any]) -> list[Any]:
    return [keyword, len(items), *items]


@dataclass(frozen=True)
class Paging:
    offset: int = DEFAULT_OFFSET
    num: int = DEFAULT_NUM

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise BuildError("offset must be >= 0")
        if self.num < 0:
            raise BuildError("num must be >= 0")

    def args(self) -> list[Any]:
        # The server already defaults to 0 10
        if (self.offset, self.num) == (DEFAULT_OFFSET, DEFAULT_NUM):
            return []
        return ["LIMIT", self.offset, self.num]


@dataclass(frozen=True)
class SortingKey:
    field: str
    ascending: bool = True

    def args(self) -> list[Any]:
        return [self.field, "ASC" if self.ascending else "DESC"]


@dataclass(frozen=True)
class HighlightOptions:
    """
    Wraps matched query terms with an open/close tag pair, e.g. <b> and </b>.
    """
    fields: Optional[Sequence[str]] = None
    tags: tuple[str, str] = ("<b>", "</b>")

    def __post_init__(self) -> None:
        if len(self.tags) != 2:
            raise BuildError("highlight tags must be an (open, close) pair")

    def args(self) -> list[Any]:
        args: list[Any] = ["HIGHLIGHT"]
        if self.fields:
            args += _counted("FIELDS", self.fields)
        args += ["TAGS", self.tags[0], self.tags[1]]
        return args


@dataclass(frozen=True)
class SummaryOptions:
    """
    Replaces field contents with the most relevant fragments.
    Zero / empty values leave the server defaults in place
    (20 tokens, 3 fragments, "...").
    """
    fields: Optional[Sequence[str]] = None
    frag_len: int = 0
    num_frags: int = 0
    separator: str = ""

    def args(self) -> list[Any]:
        args: list[Any] = ["SUMMARIZE"]
        if self.fields:
            args += _counted("FIELDS", self.fields)
        if self.frag_len > 0:
            args += ["LEN", self.frag_len]
        if self.num_frags > 0:
            args += ["FRAGS", self.num_frags]
        if self.separator:
            args += ["SEPARATOR", self.separator]
        return args


@dataclass
class Query:
    """
    A single search query and all of its options.

    ``in_keys`` and ``return_fields`` distinguish ``None`` (clause omitted)
    from an empty list (clause sent with a zero count).
    """
    raw: str
    paging: Paging = field(default_factory=Paging)

    verbatim: bool = False
    no_content: bool = False
    in_order: bool = False
    with_scores: bool = False
    with_payloads: bool = False

    slop: Optional[int] = None
    in_keys: Optional[list[str]] = None
    return_fields: Optional[list[str]] = None
    language: str = ""
    expander: str = ""
    scorer: str = ""
    payload: Optional[bytes] = None
    sort_by: Optional[SortingKey] = None
    highlight: Optional[HighlightOptions] = None
    summarize: Optional[SummaryOptions] = None

    def __post_init__(self) -> None:
        if not isinstance(self.raw, str):
            raise BuildError("raw query must be a string")
        if self.slop is not None and self.slop < 0:
            raise BuildError("slop must be >= 0")

    # ----------------------------
    # Fluent setters
    # ----------------------------

    def limit(self, offset: int, num: int) -> "Query":
        """
        LIMIT 0 0 counts matches without returning them.
        """
        self.paging = Paging(offset, num)
        return self

    def set_flags(self, **flags: bool) -> "Query":
        known = {name for name, _ in FLAG_TOKENS}
        for name, value in flags.items():
            if name not in known:
                raise BuildError(f"Unknown query flag: {name}")
            setattr(self, name, bool(value))
        return self

    def set_in_keys(self, *keys: str) -> "Query":
        self.in_keys = list(keys)
        return self

    def set_return_fields(self, *fields: str) -> "Query":
        self.return_fields = list(fields)
        return self

    def set_sort_by(self, field: str, ascending: bool = True) -> "Query":
        self.sort_by = SortingKey(field, ascending)
        return self

    def set_language(self, language: str) -> "Query":
        self.language = language
        return self

    def set_expander(self, expander: str) -> "Query":
        self.expander = expander
        return self

    def set_scorer(self, scorer: str) -> "Query":
        self.scorer = scorer
        return self

    def set_payload(self, payload: bytes) -> "Query":
        self.payload = payload
        return self

    def set_highlight(self, fields: Optional[Sequence[str]], open_tag: str, close_tag: str) -> "Query":
        self.highlight = HighlightOptions(fields=fields, tags=(open_tag, close_tag))
        return self

    def set_summarize(self, *fields: str, frag_len: int = 0, num_frags: int = 0, separator: str = "") -> "Query":
        self.summarize = SummaryOptions(
            fields=list(fields),
            frag_len=frag_len,
            num_frags=num_frags,
            separator=separator,
        )
        return self

    # ----------------------------
    # Serialization
    # ----------------------------

    def flag_args(self) -> list[str]:
        return [token for name, token in FLAG_TOKENS if getattr(self, name)]

    def args(self) -> list[Any]:
        args: list[Any] = [self.raw]
        args += self.paging.args()
        args += self.flag_args()

        if self.slop is not None:
            args += ["SLOP", self.slop]
        if self.in_keys is not None:
            args += _counted("INKEYS", self.in_keys)
        if self.return_fields is not None:
            args += _counted("RETURN", self.return_fields)
        if self.scorer:
            args += ["SCORER", self.scorer]
        if self.language:
            args += ["LANGUAGE", self.language]
        if self.expander:
            args += ["EXPANDER", self.expander]
        if self.payload is not None:
            args += ["PAYLOAD", self.payload]
        if self.sort_by is not None:
            args += ["SORTBY", *self.sort_by.args()]
        if self.highlight is not None:
            args += self.highlight.args()
        if self.summarize is not None:
            args += self.summarize.args()
        return args
