from typing import Any, Iterator, Optional


class SearchError(Exception):
    """
    Base class for every error raised by rsearch.
    """


class BuildError(SearchError, ValueError):
    """
    The request could not be turned into a command.
    Always raised before any I/O.
    """


class TransportError(SearchError):
    """
    Acquiring a connection, sending or flushing failed.
    """


class ServerError(SearchError):
    """
    The server answered a single command with an error reply.
    """


class DecodeError(SearchError):
    """
    A reply did not have the shape the request implies.
    """


class MultiError(SearchError):
    """
    Positional error container aligned index-for-index with a batch.

    Every slot starts absent (``None``). A populated slot holds the
    exception raised for the operation at that position. The container only
    counts as an error once at least one slot is populated.
    """

    def __init__(self, size: int, results: Optional[list[Any]] = None):
        super().__init__(size)
        if size < 0:
            raise ValueError("size must be >= 0")
        self._slots: list[Optional[BaseException]] = [None] * size
        self.results = results

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, position: int) -> Optional[BaseException]:
        return self._slots[position]

    def __setitem__(self, position: int, error: Optional[BaseException]) -> None:
        if error is not None and not isinstance(error, BaseException):
            raise TypeError("MultiError slots hold exceptions or None")
        self._slots[position] = error

    def __iter__(self) -> Iterator[Optional[BaseException]]:
        return iter(self._slots)

    @property
    def is_error(self) -> bool:
        return any(slot is not None for slot in self._slots)

    def failures(self) -> list[tuple[int, BaseException]]:
        return [(i, err) for i, err in enumerate(self._slots) if err is not None]

    def __str__(self) -> str:
        return "; ".join(f"[{i}] {err}" for i, err in self.failures())

    def __repr__(self) -> str:
        return f"MultiError(size={len(self)}, failures={self.failures()!r})"
