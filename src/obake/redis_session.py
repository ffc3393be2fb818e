from contextlib import contextmanager
from typing import Iterator, Optional

import redis
from redis import exceptions

from .config import settings
from .errors import StorageCorruptError, StorageQuotaError, StorageUnavailableError

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis():
    return redis_client


@contextmanager
def _storage_errors() -> Iterator[None]:
    try:
        yield
    except (exceptions.ConnectionError, exceptions.TimeoutError) as e:
        raise StorageUnavailableError(str(e)) from e
    except UnicodeDecodeError as e:
        raise StorageCorruptError(f"Stored value is not valid UTF-8: {e}") from e
    except exceptions.ResponseError as e:
        # maxmemory reached: "OOM command not allowed when used memory > 'maxmemory'"
        if str(e).startswith("OOM"):
            raise StorageQuotaError(str(e)) from e
        raise


class RedisStore:
    """Key-value store on a redis client created with decode_responses=True."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.client = client if client is not None else get_redis()

    def get(self, key: str) -> Optional[str]:
        with _storage_errors():
            return self.client.get(key)

    def set(self, key: str, value: str) -> None:
        with _storage_errors():
            self.client.set(key, value)

    def remove(self, key: str) -> None:
        with _storage_errors():
            self.client.delete(key)

    def exists(self, key: str) -> bool:
        with _storage_errors():
            return bool(self.client.exists(key))
