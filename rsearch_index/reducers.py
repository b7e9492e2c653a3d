from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from rsearch_core.errors import BuildError


@dataclass(frozen=True)
class Reducer:
    """
    One REDUCE clause inside a GROUPBY stage.
    """
    name: str
    args: Sequence[Any] = field(default_factory=tuple)
    alias: Optional[str] = None

    def as_(self, alias: str) -> "Reducer":
        return Reducer(self.name, self.args, alias)

    def serialize(self) -> list[Any]:
        out: list[Any] = ["REDUCE", self.name, len(self.args), *self.args]
        if self.alias:
            out += ["AS", self.alias]
        return out


def as_property(name: str) -> str:
    return name if name.startswith("@") else f"@{name}"


def count(alias: Optional[str] = None) -> Reducer:
    return Reducer("COUNT", (), alias)


def count_distinct(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("COUNT_DISTINCT", (as_property(prop),), alias)


def count_distinctish(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("COUNT_DISTINCTISH", (as_property(prop),), alias)


def sum_of(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("SUM", (as_property(prop),), alias)


def min_of(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("MIN", (as_property(prop),), alias)


def max_of(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("MAX", (as_property(prop),), alias)


def avg(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("AVG", (as_property(prop),), alias)


def stddev(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("STDDEV", (as_property(prop),), alias)


def quantile(prop: str, q: float, alias: Optional[str] = None) -> Reducer:
    if not 0 <= q <= 1:
        raise BuildError("quantile must be between 0 and 1")
    return Reducer("QUANTILE", (as_property(prop), q), alias)


def to_list(prop: str, alias: Optional[str] = None) -> Reducer:
    return Reducer("TOLIST", (as_property(prop),), alias)


def first_value(prop: str, by: Optional[str] = None, ascending: bool = True, alias: Optional[str] = None) -> Reducer:
    args: list[Any] = [as_property(prop)]
    if by:
        args += ["BY", as_property(by), "ASC" if ascending else "DESC"]
    return Reducer("FIRST_VALUE", tuple(args), alias)


def random_sample(prop: str, size: int, alias: Optional[str] = None) -> Reducer:
    return Reducer("RANDOM_SAMPLE", (as_property(prop), size), alias)
