from typing import Any, Protocol


class Connection(Protocol):
    """
    A duplex command channel with decoupled send / flush / receive.

    ``receive`` raises ``ServerError`` for an error reply and
    ``TransportError`` when the read itself fails.
    """

    def send(self, command: str, *args: Any) -> None: ...

    def flush(self) -> None: ...

    def receive(self) -> Any: ...

    def close(self) -> None: ...

    def discard(self) -> None: ...


class Transport(Protocol):
    def acquire(self) -> Connection: ...
