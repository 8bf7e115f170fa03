"""Abstract base class for Link data access objects (DAOs).

This class establishes a consistent contract for all Link DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Provide an interface for inserting, retrieving, editing and deleting LinkModel objects.
    - Reserve shortcodes atomically, so a shortcode maps to at most one link.
    - Resolve a shortcode to its target URL in a single data store round trip.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from simplelink.models import LinkModel
        >>> from simplelink.dao.redis import LinkRedisDAO

        >>> dao = LinkRedisDAO(...)

        >>> link = dao.insert(LinkModel(
        ...     owner_id=1,
        ...     original_url="https://example.com/blog/article-123",
        ...     short_code="a1b2c3",
        ...     created_at=datetime.now(UTC),
        ... ))
        >>> link.id
        1

        >>> dao.resolve("a1b2c3")
        (1, 'https://example.com/blog/article-123')
"""

from abc import ABC, abstractmethod

from simplelink.models import LinkModel


class LinkBaseDAO(ABC):
    """Interface for link data access objects (DAOs)

    Methods:
        insert(link: LinkModel, **kwargs) -> LinkModel:
            Persist a new link and reserve its shortcode.
            Raises ShortCodeTakenError if the shortcode is already reserved.

        get(link_id: int, **kwargs) -> LinkModel:
            Retrieve a link (including its click counter) by id.
            Raises LinkNotFoundError if the link does not exist.

        resolve(shortcode: str, **kwargs) -> tuple[int, str]:
            Resolve a shortcode to (link id, original URL).
            Raises LinkNotFoundError if the shortcode is unknown.

        list_by_owner(owner_id: int, **kwargs) -> list[LinkModel]:
            Retrieve all links of an owner, newest first.

        update(link_id: int, original_url: str | None, short_code: str | None, **kwargs) -> LinkModel:
            Edit a link's target URL and/or shortcode.
            Raises LinkNotFoundError or ShortCodeTakenError.

        delete(link_id: int, **kwargs) -> LinkModel:
            Delete a link, release its shortcode and drop its click statistics.
            Raises LinkNotFoundError if the link does not exist.

        count(increment: bool = False, **kwargs) -> int:
            Retrieve (and optionally increment) the generated shortcode counter.

    All methods raise DataStoreError on data store failures.

    Subclassing:
        Concrete implementations (e.g., LinkRedisDAO) must implement all
        abstract methods with proper data store logic.
    """

    @abstractmethod
    def insert(self, link: LinkModel, **kwargs) -> LinkModel:
        """Persist a new link and reserve its shortcode

        NOTE: Implementations must reserve the shortcode atomically: of any
              number of concurrent inserts with the same shortcode exactly one
              succeeds.

        Args:
            link (LinkModel):
                Link to persist. Its `id` is ignored and assigned by the data store.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkModel:
                The stored link, carrying its assigned id.

        Raises:
            ShortCodeTakenError:
                If the shortcode is already reserved.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, link_id: int, **kwargs) -> LinkModel:
        pass

    @abstractmethod
    def resolve(self, shortcode: str, **kwargs) -> tuple[int, str]:
        """Resolve a shortcode to (link id, original URL)

        This is the redirect hot path: implementations should answer it with a
        single data store round trip.

        Raises:
            LinkNotFoundError:
                If no link uses the shortcode.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: int, **kwargs) -> list[LinkModel]:
        pass

    @abstractmethod
    def update(self, link_id: int, original_url: str | None = None, short_code: str | None = None, **kwargs) -> LinkModel:
        """Edit a link's target URL and/or shortcode

        A new shortcode is reserved with the same atomicity guarantee as
        insert(); the previous shortcode is released afterwards.

        Args:
            link_id (int):
                Id of the link to edit.

            original_url (str | None):
                New target URL, or None to keep the current one.

            short_code (str | None):
                New shortcode, or None to keep the current one.

        Returns:
            LinkModel:
                The edited link.

        Raises:
            LinkNotFoundError:
                If the link does not exist.

            ShortCodeTakenError:
                If the new shortcode is reserved by another link.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, link_id: int, **kwargs) -> LinkModel:
        pass

    @abstractmethod
    def count(self, increment: bool = False, **kwargs) -> int:
        pass
