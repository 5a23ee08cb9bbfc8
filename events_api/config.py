import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    bind_address: str
    db_pool_min: int
    db_pool_max: int
    db_statement_timeout_ms: int
    redis_url: Optional[str]
    cache_ttl_seconds: int
    log_level: str

    @property
    def host(self) -> str:
        return self.bind_address.rsplit(":", 1)[0]

    @property
    def port(self) -> int:
        return int(self.bind_address.rsplit(":", 1)[1])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL"),
            bind_address=os.getenv("BIND_ADDRESS", "0.0.0.0:8080"),
            db_pool_min=_int_env("DB_POOL_MIN", 1),
            db_pool_max=_int_env("DB_POOL_MAX", 10),
            db_statement_timeout_ms=_int_env("DB_STATEMENT_TIMEOUT_MS", 30000),
            redis_url=os.getenv("REDIS_URL"),
            cache_ttl_seconds=_int_env("CACHE_TTL_SECONDS", 60),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
