"""Click Aggregator: folds click events into per-day and per-source statistics

Statistics are eventually consistent: the redirect path only appends events to
the click stream, and `drain()` (run by the scheduled `aggregate_clicks`
Lambda) consumes them. Delivery is at-least-once. Recording is exactly-once per
stream entry, even across overlapping runs: increments and acknowledgement
share one transaction, which only counts entries still present in the stream.
"""

import logging
import zoneinfo

from simplelink.constants import Defaults
from simplelink.models import ClickEventModel, DailyClicksModel, SourceClicksModel
from simplelink.dao.base import ClickBaseDAO
from simplelink.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)


class ClickAggregator:
    def __init__(self, click_dao: ClickBaseDAO, timezone: str = Defaults.TIMEZONE):
        self.click_dao = click_dao
        try:
            self.timezone = zoneinfo.ZoneInfo(timezone)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            raise BadConfigurationError(f"Unknown analytics timezone '{timezone}'") from e

    def day_of(self, event: ClickEventModel) -> str:
        """Calendar day (YYYY-MM-DD) of the event in the configured timezone"""
        return event.timestamp.astimezone(self.timezone).date().isoformat()

    def record(self, event: ClickEventModel, entry_id: str | None = None) -> bool:
        return self.click_dao.record(event, day=self.day_of(event), entry_id=entry_id)

    def clicks_by_day(self, link_id: int) -> list[DailyClicksModel]:
        return self.click_dao.daily(link_id)

    def clicks_by_source(self, link_id: int) -> list[SourceClicksModel]:
        return self.click_dao.sources(link_id)

    def drain(self, batch_size: int = Defaults.AGGREGATION_BATCH_SIZE, max_batches: int = Defaults.AGGREGATION_MAX_BATCHES) -> dict[str, int]:
        """Consume pending and new click events

        First re-reads entries delivered to an earlier run but never
        acknowledged, then reads new entries batch by batch until the stream
        is exhausted or `max_batches` batches were consumed.

        Returns:
            dict[str, int]: Counts of recorded, dropped (link deleted or entry already
                recorded by an overlapping run) and malformed entries.
        """
        self.click_dao.ensure_group()
        stats = {'recorded': 0, 'dropped': 0, 'malformed': 0}

        self._consume(self.click_dao.read(batch_size, pending=True), stats)
        for _ in range(max_batches):
            entries = self.click_dao.read(batch_size)
            self._consume(entries, stats)
            if len(entries) < batch_size:
                break

        logger.info('Drained click stream.', extra={'event': 'CLICKS_AGGREGATED', **stats})
        return stats

    def _consume(self, entries: list[tuple[str, ClickEventModel | None]], stats: dict[str, int]) -> None:
        for entry_id, event in entries:
            if event is None:
                logger.warning('Discarding malformed click event.', extra={'event': 'CLICK_MALFORMED', 'entryId': entry_id})
                self.click_dao.discard(entry_id)
                stats['malformed'] += 1
            elif self.record(event, entry_id=entry_id):
                stats['recorded'] += 1
            else:
                stats['dropped'] += 1
