"""Data Access Object (DAO) implementation for click events and statistics in Redis

Click events are appended to a Redis stream by the redirect path and consumed
by the aggregator through a consumer group. Each consumed entry is folded into
three per-link structures and then acknowledged and deleted from the stream:

    links:<id>:clicks           INCR      total clicks
    links:<id>:clicks:daily     HINCRBY   clicks per calendar day
    links:<id>:sources          HINCRBY   clicks per source tag

Classes:
    ClickRedisDAO:
        DAO for publishing, consuming and aggregating click events.

Example:
    >>> dao = ClickRedisDAO(prefix="simplelink:dev")
    >>> dao.publish(ClickEventModel(link_id=1, timestamp=datetime.now(UTC), source="twitter"))
    '1735214400000-0'
    >>> dao.ensure_group()
    >>> [(entry_id, event)] = dao.read(10)
    >>> dao.record(event, day='2025-12-26', entry_id=entry_id)
    True
    >>> dao.daily(1)
    [DailyClicksModel(date='2025-12-26', clicks=1)]
"""

import logging
from datetime import datetime

import redis
from beartype import beartype

from simplelink.constants import Defaults
from simplelink.models import ClickEventModel, DailyClicksModel, SourceClicksModel
from simplelink.dao.base import ClickBaseDAO
from simplelink.dao.redis.mixins import RedisClientMixin
from simplelink.dao.redis.helpers import handle_redis_connection_error


logger = logging.getLogger(__name__)


class ClickRedisDAO(RedisClientMixin, ClickBaseDAO):
    """Redis stream backed click DAO

    Attributes (in addition to RedisClientMixin):
        group (str):
            Consumer group of the aggregator.
        consumer (str):
            Consumer name within the group.
    """

    def __init__(self, *args, group: str = Defaults.CONSUMER_GROUP, consumer: str = Defaults.CONSUMER_NAME, **kwargs):
        super().__init__(*args, **kwargs)
        self.group = group
        self.consumer = consumer

    @handle_redis_connection_error
    @beartype
    def publish(self, event: ClickEventModel, **kwargs) -> str:
        # fmt: off
        return self.redis.xadd(self.keys.click_stream_key(), {
            'link_id': event.link_id,
            'timestamp': event.timestamp.isoformat(),
            'source': event.source,
        })
        # fmt: on

    @handle_redis_connection_error
    def ensure_group(self, **kwargs) -> None:
        try:
            self.redis.xgroup_create(self.keys.click_stream_key(), self.group, id='0', mkstream=True)
        except redis.exceptions.ResponseError as e:
            if 'BUSYGROUP' not in str(e):
                raise
        else:
            logger.info('Created click stream consumer group.', extra={'group': self.group})

    @handle_redis_connection_error
    @beartype
    def read(self, count: int, pending: bool = False, **kwargs) -> list[tuple[str, ClickEventModel | None]]:
        """Read entries for this consumer

        Args:
            count (int):
                Maximum number of entries to read.
            pending (bool):
                If True, re-read this consumer's delivered but unacknowledged
                entries (XREADGROUP ... 0) instead of new ones (XREADGROUP ... >).

        Returns:
            list[tuple[str, ClickEventModel | None]]:
                (entry id, event) pairs in stream order. The event is None for
                entries that cannot be parsed or were deleted while pending.
        """
        stream_key = self.keys.click_stream_key()
        reply = self.redis.xreadgroup(self.group, self.consumer, {stream_key: '0' if pending else '>'}, count=count)
        return [(entry_id, self._parse(fields)) for _, entries in reply or [] for entry_id, fields in entries]

    @handle_redis_connection_error
    @beartype
    def record(self, event: ClickEventModel, day: str, entry_id: str | None = None, **kwargs) -> bool:
        """Fold a click event into its link statistics and acknowledge the entry

        The increments and the XACK/XDEL run in one MULTI/EXEC, guarded by a
        WATCH on the link record and on the click stream:

            - a crash before EXEC leaves the entry pending, so it is re-read
              by the next drain;
            - an entry already gone from the stream was recorded by an
              overlapping drain (both runs share the consumer name and so its
              pending entries); it is only acknowledged, never counted twice;
            - a link deleted concurrently aborts EXEC, the retry sees the link
              gone and only acknowledges the entry (no orphan counters).

        Returns:
            bool: True if counted, False if the link no longer exists or the
                  entry was already recorded.
        """
        link_key = self.keys.link_key(event.link_id)
        stream_key = self.keys.click_stream_key()

        def apply(pipe) -> bool:
            fresh = entry_id is None or bool(pipe.xrange(stream_key, min=entry_id, max=entry_id, count=1))
            exists = bool(pipe.exists(link_key))
            pipe.multi()
            if fresh and exists:
                pipe.incr(self.keys.link_clicks_key(event.link_id))
                pipe.hincrby(self.keys.link_daily_clicks_key(event.link_id), day, 1)
                pipe.hincrby(self.keys.link_sources_key(event.link_id), event.source, 1)
            if entry_id is not None:
                pipe.xack(stream_key, self.group, entry_id)
                pipe.xdel(stream_key, entry_id)
            return fresh and exists

        watched = (link_key, stream_key) if entry_id is not None else (link_key,)
        return self.redis.transaction(apply, *watched, value_from_callable=True)

    @handle_redis_connection_error
    @beartype
    def discard(self, entry_id: str, **kwargs) -> None:
        stream_key = self.keys.click_stream_key()
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.xack(stream_key, self.group, entry_id)
            pipe.xdel(stream_key, entry_id)
            pipe.execute()

    @handle_redis_connection_error
    @beartype
    def daily(self, link_id: int, **kwargs) -> list[DailyClicksModel]:
        data = self.redis.hgetall(self.keys.link_daily_clicks_key(link_id))
        return [DailyClicksModel(date=day, clicks=int(clicks)) for day, clicks in sorted(data.items())]

    @handle_redis_connection_error
    @beartype
    def sources(self, link_id: int, **kwargs) -> list[SourceClicksModel]:
        data = self.redis.hgetall(self.keys.link_sources_key(link_id))
        counts = sorted(((source, int(count)) for source, count in data.items()), key=lambda item: (-item[1], item[0]))
        return [SourceClicksModel(source=source, count=count) for source, count in counts]

    @staticmethod
    def _parse(fields: dict[str, str] | None) -> ClickEventModel | None:
        if not fields:
            return None
        try:
            return ClickEventModel(
                link_id=int(fields['link_id']),
                timestamp=datetime.fromisoformat(fields['timestamp']),
                source=fields.get('source') or Defaults.CLICK_SOURCE,
            )
        except (KeyError, TypeError, ValueError):
            return None
