"""Redis client plumbing shared by every Redis-backed DAO.

Classes:
    - RedisClientMixin: builds (or reuses) the Redis client, namespaces keys and PINGs on startup.

Example:
    One client per Lambda invocation, shared by the DAOs it needs:

        >>> link_dao = LinkRedisDAO(redis_host='redis.internal', prefix='simplelink:prod')
        >>> click_dao = ClickRedisDAO(redis_client=link_dao.redis, prefix='simplelink:prod')
        >>> click_dao.healthcheck()
        True
"""

from typing import Optional

import redis

from simplelink.dao.redis.redis_key_schema import RedisKeySchema
from simplelink.dao.exceptions import DataStoreError


# Seconds; a redirect must not hang on an unreachable Redis
DEFAULT_SOCKET_TIMEOUT = 2.0


class RedisClientMixin:
    """Redis client setup and health check for Redis-backed DAOs.

    Attributes:
        redis (redis.Redis):
            Client used by the DAO methods.

        keys (RedisKeySchema):
            Key names under the DAO's namespace prefix.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_socket_timeout: Optional[float] = DEFAULT_SOCKET_TIMEOUT,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Connect to Redis, or adopt `redis_client` when one is given

        The `redis_*` arguments mirror the `redis` block of a lambda's
        AppConfig section (see `simplelink.utils.config.redis_config`) and are
        ignored when `redis_client` is passed.

        Raises:
            DataStoreError: If Redis does not answer the startup PING.
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_socket_timeout,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self.healthcheck()

    def connection_label(self) -> str:
        """host:port/db of the underlying client, for error messages"""
        info = self.redis.connection_pool.connection_kwargs
        return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'

    def healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns False on a failed PING when `raise_error` is False.

        Raises:
            DataStoreError: On a failed PING when `raise_error` is True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if raise_error:
                raise DataStoreError(
                    f"Can't connect to Redis at {self.connection_label()}. Check the provided configuration parameters."
                ) from e
            return False
        return True
