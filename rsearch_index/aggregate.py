from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from rsearch_core.errors import BuildError

from .query import Query
from .reducers import Reducer, as_property


# ----------------------------
# Pipeline stages
# ----------------------------

@dataclass(frozen=True)
class Load:
    fields: Sequence[str]

    def args(self) -> list[Any]:
        props = [as_property(f) for f in self.fields]
        return ["LOAD", len(props), *props]


@dataclass(frozen=True)
class GroupBy:
    fields: Sequence[str]
    reducers: Sequence[Reducer] = field(default_factory=tuple)

    def args(self) -> list[Any]:
        props = [as_property(f) for f in self.fields]
        args: list[Any] = ["GROUPBY", len(props), *props]
        for reducer in self.reducers:
            args += reducer.serialize()
        return args


@dataclass(frozen=True)
class SortBy:
    """
    ``keys`` is a sequence of (property, ascending) pairs.
    """
    keys: Sequence[tuple[str, bool]]
    max: int = 0

    def __post_init__(self) -> None:
        if not self.keys:
            raise BuildError("aggregate SORTBY needs at least one key")
        if self.max < 0:
            raise BuildError("aggregate SORTBY max must be >= 0")

    def args(self) -> list[Any]:
        flat: list[Any] = []
        for prop, ascending in self.keys:
            flat += [as_property(prop), "ASC" if ascending else "DESC"]
        args: list[Any] = ["SORTBY", len(flat), *flat]
        if self.max > 0:
            args += ["MAX", self.max]
        return args


@dataclass(frozen=True)
class Apply:
    expression: str
    alias: str

    def args(self) -> list[Any]:
        return ["APPLY", self.expression, "AS", self.alias]


@dataclass(frozen=True)
class Filter:
    expression: str

    def args(self) -> list[Any]:
        return ["FILTER", self.expression]


@dataclass(frozen=True)
class Limit:
    offset: int
    num: int

    def __post_init__(self) -> None:
        if self.offset < 0 or self.num < 0:
            raise BuildError("aggregate LIMIT values must be >= 0")

    def args(self) -> list[Any]:
        return ["LIMIT", self.offset, self.num]


Stage = Union[Load, GroupBy, SortBy, Apply, Filter, Limit]


# ----------------------------
# Cursor
# ----------------------------

@dataclass(frozen=True)
class CursorOptions:
    """
    ``count`` rows per read and ``max_idle`` milliseconds before the server
    drops an unread cursor. Zero leaves the server default.
    """
    count: int = 0
    max_idle: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise BuildError("cursor count must be >= 0")
        if self.max_idle < 0:
            raise BuildError("cursor max_idle must be >= 0")

    def args(self) -> list[Any]:
        args: list[Any] = ["WITHCURSOR"]
        if self.count > 0:
            args += ["COUNT", self.count]
        if self.max_idle > 0:
            args += ["MAXIDLE", self.max_idle]
        return args


@dataclass
class CursorSession:
    """
    Server-side cursor state returned by the first aggregate call and
    threaded by the caller into every continuation read.

    A handle of 0 means the cursor is exhausted. Each reader owns its own
    session; sessions must not be shared between concurrent readers.
    """
    index_name: str
    handle: int
    count: int = 0

    @property
    def has_more(self) -> bool:
        return self.handle != 0

    def exhaust(self) -> None:
        self.handle = 0

    def read_args(self) -> list[Any]:
        args: list[Any] = ["READ", self.index_name, self.handle]
        if self.count > 0:
            args += ["COUNT", self.count]
        return args

    def delete_args(self) -> list[Any]:
        return ["DEL", self.index_name, self.handle]


@dataclass(frozen=True)
class AggregateResult:
    total: int
    rows: list[dict[str, Any]]
    cursor: Optional[CursorSession] = None

    @property
    def has_more(self) -> bool:
        return self.cursor is not None and self.cursor.has_more


# ----------------------------
# Query
# ----------------------------

@dataclass
class AggregateQuery:
    """
    A search query followed by an ordered processing pipeline.

    Stages are emitted exactly in the order they were added; the server
    pipeline is order-sensitive.
    """
    query: Query = field(default_factory=lambda: Query("*"))
    stages: list[Stage] = field(default_factory=list)
    cursor: Optional[CursorOptions] = None

    def __post_init__(self) -> None:
        if isinstance(self.query, str):
            self.query = Query(self.query)

    def add_stage(self, stage: Stage) -> "AggregateQuery":
        self.stages.append(stage)
        return self

    def load(self, *fields: str) -> "AggregateQuery":
        return self.add_stage(Load(fields))

    def group_by(self, fields: Sequence[str], *reducers: Reducer) -> "AggregateQuery":
        return self.add_stage(GroupBy(tuple(fields), reducers))

    def sort_by(self, *keys: tuple[str, bool], max: int = 0) -> "AggregateQuery":
        return self.add_stage(SortBy(keys, max))

    def apply(self, expression: str, alias: str) -> "AggregateQuery":
        return self.add_stage(Apply(expression, alias))

    def filter(self, expression: str) -> "AggregateQuery":
        return self.add_stage(Filter(expression))

    def limit(self, offset: int, num: int) -> "AggregateQuery":
        return self.add_stage(Limit(offset, num))

    def with_cursor(self, count: int = 0, max_idle: int = 0) -> "AggregateQuery":
        self.cursor = CursorOptions(count, max_idle)
        return self

    def args(self) -> list[Any]:
        args: list[Any] = [self.query.raw]
        if self.query.verbatim:
            args.append("VERBATIM")
        for stage in self.stages:
            args += stage.args()
        if self.cursor is not None:
            args += self.cursor.args()
        return args
