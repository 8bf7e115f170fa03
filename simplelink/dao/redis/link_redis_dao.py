"""Data Access Object (DAO) implementation for managing links in Redis

This module provides a Redis-based implementation of LinkBaseDAO for CRUD
operations with LinkModel instances.

Responsibilities:
    - Insert, retrieve, edit and delete links;
    - Reserve shortcodes atomically (HSETNX on the shortcode index);
    - Resolve shortcodes with a single round trip for the redirect path;
    - Maintain the per-owner link index ordered by creation time;
    - Increment the global generated-shortcode counter;
    - Map Redis failures and missing records to DAO exceptions.

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving LinkModel in a Redis datastore.

Example:
    >>> from simplelink.models import LinkModel
    >>> from simplelink.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="simplelink:dev")

    >>> link = dao.insert(LinkModel(
    ...     owner_id=1,
    ...     original_url="https://example.com/page",
    ...     short_code="abc123",
    ...     created_at=datetime.now(UTC),
    ... ))
    >>> dao.resolve("abc123")
    (1, 'https://example.com/page')

    >>> dao.update(link.id, short_code="xyz789").short_code
    'xyz789'
    >>> dao.delete(link.id)
    LinkModel(...)
"""

import logging
import dataclasses
from datetime import datetime
from typing import Any

import redis
from beartype import beartype

from simplelink.models import LinkModel
from simplelink.dao.base import LinkBaseDAO
from simplelink.dao.redis.mixins import RedisClientMixin
from simplelink.dao.redis.helpers import handle_redis_connection_error, as_int
from simplelink.dao.exceptions import LinkNotFoundError, ShortCodeTakenError


logger = logging.getLogger(__name__)


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing links

    This class implements the LinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Example:
        >>> dao = LinkRedisDAO(redis_host="localhost", prefix="simplelink:test")
        >>> dao.count(increment=True)
        1
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, link: LinkModel, **kwargs) -> LinkModel:
        """Insert a link and reserve its shortcode

        Args:
            link (LinkModel):
                Link to store. Its id is assigned from the link counter.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LinkModel: The stored link with its assigned id.

        Raises:
            ShortCodeTakenError:
                If another link already reserved the shortcode.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_id = self.redis.incr(self.keys.link_counter_key())
        shortcode_key = self.keys.shortcode_key(link.short_code)

        # NOTE: HSETNX is the single point of truth for shortcode uniqueness.
        #       Of any number of concurrent inserts with the same shortcode
        #       exactly one claims the 'id' field, the rest fail here.
        #
        #       The URL and the link record are written right after the claim,
        #       so for a brief moment a reader may see the claim without a URL:
        #
        #       (lambda 1): LinkRedisDAO.insert():
        #                   -> HSETNX <app>:shortcodes:<code> id <link id>
        #                   ... interruption
        #       (lambda 2): LinkRedisDAO.resolve():
        #                   -> HMGET <app>:shortcodes:<code> id url  => (<link id>, nil)
        #
        #       resolve() treats such a half-written entry as not found.
        #       If the write fails, the claim is released again (see _release_claim).
        if not self.redis.hsetnx(shortcode_key, 'id', link_id):
            raise ShortCodeTakenError(f"Shortcode '{link.short_code}' is already taken.")

        stored = dataclasses.replace(link, id=link_id, clicks=0)
        try:
            with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(shortcode_key, 'url', link.original_url)
                pipe.hset(self.keys.link_key(link_id), mapping=self._to_hash(stored))
                pipe.zadd(self.keys.user_links_key(link.owner_id), {str(link_id): link.created_at.timestamp()})
                pipe.execute()
        except redis.exceptions.RedisError:
            self._release_claim(link.short_code, link_id)
            raise
        return stored

    @handle_redis_connection_error
    @beartype
    def get(self, link_id: int, **kwargs) -> LinkModel:
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hgetall(self.keys.link_key(link_id))
            pipe.get(self.keys.link_clicks_key(link_id))
            data, clicks = pipe.execute()

        if not data:
            raise LinkNotFoundError(f"Link with id '{link_id}' not found.")
        return self._from_hash(data, clicks)

    @handle_redis_connection_error
    @beartype
    def resolve(self, shortcode: str, **kwargs) -> tuple[int, str]:
        """Resolve a shortcode with a single HMGET

        Raises:
            LinkNotFoundError:
                If the shortcode is unknown (or its insert is still in flight).
            DataStoreError:
                If a Redis connection issue occurs.

        Example:
            >>> dao.resolve('abc123')
            (1, 'https://example.com')
        """
        link_id, original_url = self.redis.hmget(self.keys.shortcode_key(shortcode), 'id', 'url')
        if link_id is None or original_url is None:
            raise LinkNotFoundError(f"Shortcode '{shortcode}' not found.")
        return int(link_id), original_url

    @handle_redis_connection_error
    @beartype
    def list_by_owner(self, owner_id: int, **kwargs) -> list[LinkModel]:
        link_ids = self.redis.zrevrange(self.keys.user_links_key(owner_id), 0, -1)
        if not link_ids:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for link_id in link_ids:
                pipe.hgetall(self.keys.link_key(link_id))
                pipe.get(self.keys.link_clicks_key(link_id))
            replies = pipe.execute()

        # Links deleted between ZREVRANGE and the pipeline come back empty
        return [self._from_hash(data, clicks) for data, clicks in zip(replies[::2], replies[1::2]) if data]

    @handle_redis_connection_error
    @beartype
    def update(self, link_id: int, original_url: str | None = None, short_code: str | None = None, **kwargs) -> LinkModel:
        """Edit a link's target URL and/or shortcode

        A new shortcode is claimed with HSETNX first (same guarantee as insert).
        The link record, the shortcode index and the release of the previous
        shortcode are then applied in one WATCH/MULTI transaction on the link
        record, so an edit racing a delete never resurrects the link.

        Args:
            link_id (int):
                Id of the link to edit.
            original_url (str | None):
                New target URL, or None to keep the current one.
            short_code (str | None):
                New shortcode, or None to keep the current one.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LinkModel: The edited link.

        Raises:
            LinkNotFoundError:
                If the link does not exist.
            ShortCodeTakenError:
                If the new shortcode is reserved by another link.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_key = self.keys.link_key(link_id)
        current = self.redis.hgetall(link_key)
        if not current:
            raise LinkNotFoundError(f"Link with id '{link_id}' not found.")

        claimed = short_code is not None and short_code != current['short_code']
        if claimed and not self.redis.hsetnx(self.keys.shortcode_key(short_code), 'id', link_id):
            raise ShortCodeTakenError(f"Shortcode '{short_code}' is already taken.")

        def apply(pipe) -> str | None:
            # Re-read under WATCH: a concurrent edit may have moved the link in the meantime
            live_code, live_url = pipe.hmget(link_key, 'short_code', 'original_url')
            if live_code is None:
                return None

            code = short_code if claimed else live_code
            url = original_url if original_url is not None else live_url
            pipe.multi()
            if code != live_code:
                pipe.delete(self.keys.shortcode_key(live_code))
            pipe.hset(self.keys.shortcode_key(code), mapping={'id': link_id, 'url': url})
            pipe.hset(link_key, mapping={'original_url': url, 'short_code': code})
            return code

        try:
            code = self.redis.transaction(apply, link_key, value_from_callable=True)
        except redis.exceptions.RedisError:
            if claimed:
                self._release_claim(short_code, link_id)
            raise

        if code is None:
            if claimed:
                self._release_claim(short_code, link_id)
            raise LinkNotFoundError(f"Link with id '{link_id}' not found.")
        return self.get(link_id)

    @handle_redis_connection_error
    @beartype
    def delete(self, link_id: int, **kwargs) -> LinkModel:
        """Delete a link together with its shortcode and click statistics

        Raises:
            LinkNotFoundError:
                If the link does not exist.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_key = self.keys.link_key(link_id)

        def apply(pipe) -> dict[str, Any] | None:
            data = pipe.hgetall(link_key)
            if not data:
                return None

            pipe.multi()
            pipe.delete(
                link_key,
                self.keys.shortcode_key(data['short_code']),
                self.keys.link_clicks_key(link_id),
                self.keys.link_daily_clicks_key(link_id),
                self.keys.link_sources_key(link_id),
            )
            pipe.zrem(self.keys.user_links_key(int(data['owner_id'])), str(link_id))
            return data

        data = self.redis.transaction(apply, link_key, value_from_callable=True)
        if data is None:
            raise LinkNotFoundError(f"Link with id '{link_id}' not found.")
        return self._from_hash(data)

    @handle_redis_connection_error
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve global generated-shortcode counter

        Args:
            increment (bool):
                If True, increments the counter. Otherwise, retrieves its value.
            **kwargs:
                Optional keyword arguments.

        Returns:
            int:
                The updated or current global counter value.

        Example:
            >>> dao.count(increment=False)
            123
            >>> dao.count(increment=True)
            124
        """
        if increment:
            return self.redis.incr(self.keys.shortcode_counter_key())
        else:
            return as_int(self.redis.get(self.keys.shortcode_counter_key()))

    def _release_claim(self, shortcode: str, link_id: int) -> None:
        """Drop a shortcode claimed by `link_id` that its link record does not point to

        A write whose reply was lost may still have committed; the claim is
        kept whenever the link record already carries the shortcode. A failed
        release is logged and the caller's error propagates.
        """
        shortcode_key = self.keys.shortcode_key(shortcode)
        link_key = self.keys.link_key(link_id)

        def apply(pipe) -> None:
            claimant = as_int(pipe.hget(shortcode_key, 'id'), default=-1)
            live_code = pipe.hget(link_key, 'short_code')
            pipe.multi()
            if claimant == link_id and live_code != shortcode:
                pipe.delete(shortcode_key)

        try:
            self.redis.transaction(apply, shortcode_key, link_key)
        except redis.exceptions.RedisError:
            logger.warning(
                'Failed to release shortcode claim.',
                extra={'event': 'SHORTCODE_CLAIM_LEAKED', 'shortcode': shortcode, 'linkId': link_id},
            )

    @staticmethod
    def _to_hash(link: LinkModel) -> dict[str, Any]:
        return {
            'id': link.id,
            'owner_id': link.owner_id,
            'original_url': link.original_url,
            'short_code': link.short_code,
            'created_at': link.created_at.isoformat(),
        }

    @staticmethod
    def _from_hash(data: dict[str, str], clicks: str | None = None) -> LinkModel:
        return LinkModel(
            id=int(data['id']),
            owner_id=int(data['owner_id']),
            original_url=data['original_url'],
            short_code=data['short_code'],
            created_at=datetime.fromisoformat(data['created_at']),
            clicks=as_int(clicks),
        )
