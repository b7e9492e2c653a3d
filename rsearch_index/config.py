import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RedisConfig:
    """
    Connection settings for the Redis server hosting the search module.
    """
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: Optional[float] = 5.0
    max_connections: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must be a non-empty string")
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")
        if self.db < 0:
            raise ValueError("db must be >= 0")
        if self.socket_timeout is not None and self.socket_timeout <= 0:
            raise ValueError("socket_timeout must be positive")
        if self.max_connections is not None and self.max_connections <= 0:
            raise ValueError("max_connections must be positive")

    @classmethod
    def from_env(cls, prefix: str = "RSEARCH_") -> "RedisConfig":
        """
        Read settings from ``<prefix>HOST``, ``PORT``, ``DB``, ``PASSWORD``,
        ``SOCKET_TIMEOUT`` and ``MAX_CONNECTIONS``. Unset or empty variables
        keep the defaults.
        """

        def env(key: str) -> Optional[str]:
            val = os.getenv(f"{prefix}{key}") or None
            return val.strip() if val is not None else None

        kwargs = {}
        try:
            if env("HOST"):
                kwargs["host"] = env("HOST")
            if env("PORT"):
                kwargs["port"] = int(env("PORT"))
            if env("DB"):
                kwargs["db"] = int(env("DB"))
            if env("PASSWORD"):
                kwargs["password"] = env("PASSWORD")
            if env("SOCKET_TIMEOUT"):
                kwargs["socket_timeout"] = float(env("SOCKET_TIMEOUT"))
            if env("MAX_CONNECTIONS"):
                kwargs["max_connections"] = int(env("MAX_CONNECTIONS"))
        except ValueError as e:
            raise ValueError(f"Invalid {prefix}* environment variable: {e}") from e
        return cls(**kwargs)
