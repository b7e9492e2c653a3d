import logging
from typing import Any, Optional

from redis import ConnectionPool
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    DataError,
    RedisError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)

from rsearch_core.errors import ServerError, TransportError

from .config import RedisConfig

logger = logging.getLogger(__name__)


class RedisConnection:
    """
    One pooled redis-py connection with decoupled send / flush / receive.

    ``send`` only encodes the command into a local buffer, ``flush`` writes
    the whole buffer in one go and ``receive`` reads the next reply.
    """

    def __init__(self, pool: ConnectionPool, conn: Any):
        self._pool = pool
        self._conn = conn
        self._buffer: list[bytes] = []
        self._released = False

    def send(self, command: str, *args: Any) -> None:
        try:
            self._buffer.extend(self._conn.pack_command(command, *args))
        except DataError as e:
            raise TransportError(f"Cannot encode {command}: {e}") from e

    def flush(self) -> None:
        if not self._buffer:
            return
        packed, self._buffer = self._buffer, []
        try:
            self._conn.send_packed_command(packed)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise TransportError(f"Write failed: {e}") from e

    def receive(self) -> Any:
        try:
            return self._conn.read_response()
        except ResponseError as e:
            raise ServerError(str(e)) from e
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise TransportError(f"Read failed: {e}") from e
        except RedisError as e:
            raise TransportError(str(e)) from e

    def close(self) -> None:
        if self._released:
            return
        self._released = True
        self._buffer = []
        self._pool.release(self._conn)

    def discard(self) -> None:
        """
        Drop the socket before releasing, for connections that may still
        have unread replies in flight.
        """
        if self._released:
            return
        try:
            self._conn.disconnect()
        finally:
            self.close()


class RedisTransport:
    def __init__(self, config: Optional[RedisConfig] = None, pool: Optional[ConnectionPool] = None):
        self.config = config or RedisConfig()
        if pool is not None:
            self.pool = pool
        else:
            self.pool = ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                max_connections=self.config.max_connections,
            )

    def acquire(self) -> RedisConnection:
        try:
            conn = self.pool.get_connection()
        except RedisError as e:
            raise TransportError(f"Cannot acquire connection: {e}") from e
        logger.debug("Acquired connection to %s:%s", self.config.host, self.config.port)
        return RedisConnection(self.pool, conn)

    def close(self) -> None:
        self.pool.disconnect()
