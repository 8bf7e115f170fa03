"""Link Store: owner-scoped CRUD over links

Every mutating operation checks ownership: an unknown link id is NotFound
(404), a link of another user is Forbidden (403).
"""

import logging
from datetime import datetime, UTC

from simplelink.models import LinkModel
from simplelink.dao.base import LinkBaseDAO
from simplelink.dao.exceptions import LinkNotFoundError
from simplelink.exceptions import ForbiddenError, NotFoundError, ValidationError
from simplelink.services.allocator import CodeAllocator
from simplelink.utils.shortener import SHORTCODE_PATTERN
from simplelink.utils.validators import validate_url


logger = logging.getLogger(__name__)


class LinkStore:
    def __init__(self, link_dao: LinkBaseDAO, allocator: CodeAllocator | None = None):
        self.link_dao = link_dao
        self.allocator = allocator or CodeAllocator(link_dao)

    def create(self, owner_id: int, url: str, code: str | None = None) -> LinkModel:
        """Create a link for `owner_id`, generating a shortcode unless `code` is given

        Raises:
            ValidationError: Bad URL or malformed/reserved custom code.
            CollisionError: Custom code already taken.
            AllocationExhaustedError: No free generated shortcode.
        """
        original_url = validate_url(url)
        created_at = datetime.now(UTC)

        def reserve(short_code: str) -> LinkModel:
            # fmt: off
            return self.link_dao.insert(LinkModel(owner_id=owner_id,
                                                  original_url=original_url,
                                                  short_code=short_code,
                                                  created_at=created_at))
            # fmt: on

        link = self.allocator.allocate(reserve, requested_code=code)
        logger.info(
            'Created link.',
            extra={'event': 'LINK_CREATED', 'linkId': link.id, 'shortcode': link.short_code, 'ownerId': owner_id},
        )
        return link

    def list(self, owner_id: int) -> list[LinkModel]:
        """All links of `owner_id`, newest first"""
        return self.link_dao.list_by_owner(owner_id)

    def get(self, owner_id: int, link_id: int) -> LinkModel:
        try:
            link = self.link_dao.get(link_id)
        except LinkNotFoundError as e:
            raise NotFoundError('Link not found') from e

        if link.owner_id != owner_id:
            raise ForbiddenError('You do not have access to this link')
        return link

    def update(self, owner_id: int, link_id: int, url: str | None = None, code: str | None = None) -> LinkModel:
        """Edit the target URL and/or shortcode of an owned link

        Raises:
            ValidationError: Empty patch, bad URL or malformed/reserved code.
            NotFoundError / ForbiddenError: See get().
            CollisionError: New code already taken by another link.
        """
        if url is None and code is None:
            raise ValidationError('Nothing to update: provide url and/or custom_code')

        original_url = validate_url(url) if url is not None else None
        current = self.get(owner_id, link_id)

        def reserve(short_code: str | None) -> LinkModel:
            try:
                return self.link_dao.update(link_id, original_url=original_url, short_code=short_code)
            except LinkNotFoundError as e:
                raise NotFoundError('Link not found') from e

        if code is None or code == current.short_code:
            link = reserve(None)
        else:
            link = self.allocator.allocate(reserve, requested_code=code)

        logger.info('Updated link.', extra={'event': 'LINK_UPDATED', 'linkId': link_id, 'shortcode': link.short_code})
        return link

    def delete(self, owner_id: int, link_id: int) -> None:
        self.get(owner_id, link_id)
        try:
            self.link_dao.delete(link_id)
        except LinkNotFoundError as e:
            raise NotFoundError('Link not found') from e
        logger.info('Deleted link.', extra={'event': 'LINK_DELETED', 'linkId': link_id})

    def locate(self, code: str) -> tuple[int, str]:
        """Resolve a shortcode to (link id, original URL)

        Raises:
            NotFoundError: If no link uses the shortcode.
        """
        # Codes outside the shortcode grammar can never exist, skip the data store
        if not SHORTCODE_PATTERN.fullmatch(code):
            raise NotFoundError('Short link not found')
        try:
            return self.link_dao.resolve(code)
        except LinkNotFoundError as e:
            raise NotFoundError('Short link not found') from e

    def resolve(self, code: str) -> str:
        _, original_url = self.locate(code)
        return original_url
