"""Redirect Dispatcher: the public hot path

Resolves a shortcode, publishes a click event and hands back the target URL.
Click publishing is best-effort: a bounded number of attempts, then the event
is dropped with a warning. A redirect never fails because of analytics.
"""

import logging
from datetime import datetime, UTC

from simplelink.constants import Defaults
from simplelink.models import ClickEventModel
from simplelink.dao.base import ClickBaseDAO
from simplelink.dao.exceptions import DataStoreError
from simplelink.services.link_store import LinkStore
from simplelink.utils.validators import normalize_source


logger = logging.getLogger(__name__)


class RedirectDispatcher:
    def __init__(self, link_store: LinkStore, click_dao: ClickBaseDAO, publish_attempts: int = Defaults.CLICK_PUBLISH_ATTEMPTS):
        self.link_store = link_store
        self.click_dao = click_dao
        self.publish_attempts = publish_attempts

    def dispatch(self, code: str, source: str | None = None) -> str:
        """Resolve `code` and record the click

        Returns:
            str: The original URL to redirect to.

        Raises:
            NotFoundError: If the shortcode is unknown (no click is published).
        """
        link_id, original_url = self.link_store.locate(code)
        self.publish(ClickEventModel(link_id=link_id, timestamp=datetime.now(UTC), source=normalize_source(source)))
        return original_url

    def publish(self, event: ClickEventModel) -> bool:
        """Publish a click event, retrying on data store errors

        Returns:
            bool: True if published, False if the event was dropped.
        """
        for attempt in range(1, self.publish_attempts + 1):
            try:
                self.click_dao.publish(event)
                return True
            except DataStoreError:
                logger.warning(
                    'Failed to publish click event.',
                    extra={'event': 'CLICK_PUBLISH_FAILED', 'linkId': event.link_id, 'attempt': attempt},
                )

        logger.warning(
            'Dropping click event after %s attempts.',
            self.publish_attempts,
            extra={'event': 'CLICK_DROPPED', 'linkId': event.link_id, 'source': event.source},
        )
        return False
