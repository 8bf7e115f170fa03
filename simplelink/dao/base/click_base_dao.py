"""Abstract base class for click event data access objects (DAOs).

Click events flow through an append-only log: the redirect path publishes,
the aggregator consumes and folds every event into per-link statistics.

Example:
    >>> dao = ClickRedisDAO(...)
    >>> dao.publish(ClickEventModel(link_id=1, timestamp=datetime.now(UTC), source='twitter'))
    '1735214400000-0'
    >>> dao.ensure_group()
    >>> for entry_id, event in dao.read(100):
    ...     dao.record(event, day='2025-12-26', entry_id=entry_id)
    >>> dao.sources(1)
    [SourceClicksModel(source='twitter', count=1)]
"""

from abc import ABC, abstractmethod

from simplelink.models import ClickEventModel, DailyClicksModel, SourceClicksModel


class ClickBaseDAO(ABC):
    """Interface for click event data access objects (DAOs)

    Methods:
        publish(event: ClickEventModel, **kwargs) -> str:
            Append a click event to the event log. Returns the entry id.

        ensure_group(**kwargs) -> None:
            Create the aggregator's consumer group if it does not exist yet.

        read(count: int, pending: bool = False, **kwargs) -> list[tuple[str, ClickEventModel | None]]:
            Read up to `count` entries for the aggregator. With pending=True,
            re-read entries delivered before but never acknowledged. Entries
            that cannot be parsed are returned with a None event.

        record(event: ClickEventModel, day: str, entry_id: str | None = None, **kwargs) -> bool:
            Fold an event into the link statistics and acknowledge its entry.
            Returns False (and still acknowledges) if the link no longer exists
            or the entry was already recorded, so an entry is counted at most once.

        discard(entry_id: str, **kwargs) -> None:
            Acknowledge and drop an entry without recording it.

        daily(link_id: int, **kwargs) -> list[DailyClicksModel]:
            Clicks per calendar day, ascending by date.

        sources(link_id: int, **kwargs) -> list[SourceClicksModel]:
            Clicks per source tag, by count descending then source ascending.

    All methods raise DataStoreError on data store failures.
    """

    @abstractmethod
    def publish(self, event: ClickEventModel, **kwargs) -> str:
        pass

    @abstractmethod
    def ensure_group(self, **kwargs) -> None:
        pass

    @abstractmethod
    def read(self, count: int, pending: bool = False, **kwargs) -> list[tuple[str, ClickEventModel | None]]:
        pass

    @abstractmethod
    def record(self, event: ClickEventModel, day: str, entry_id: str | None = None, **kwargs) -> bool:
        """Fold a click event into the statistics of its link

        NOTE: Implementations must apply the click counter, the per-day and the
              per-source increments and the acknowledgement of `entry_id` as one
              atomic unit, so an event is either fully recorded and acknowledged
              or not at all (and will be re-delivered). An entry that was already
              recorded by a concurrent consumer must not be counted again.

        Args:
            event (ClickEventModel):
                The click event.

            day (str):
                Calendar day bucket of the event (YYYY-MM-DD).

            entry_id (str | None):
                Event log entry to acknowledge, if the event was read from the log.

        Returns:
            bool:
                True if recorded, False if the link no longer exists or the entry
                was already recorded.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def discard(self, entry_id: str, **kwargs) -> None:
        pass

    @abstractmethod
    def daily(self, link_id: int, **kwargs) -> list[DailyClicksModel]:
        pass

    @abstractmethod
    def sources(self, link_id: int, **kwargs) -> list[SourceClicksModel]:
        pass
