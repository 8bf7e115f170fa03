"""Code Allocator: picks the shortcode of a new or edited link

Requested shortcodes are validated and reserved as-is; otherwise the next
value of the global shortcode counter is permuted into a fixed-length base62
code. Reservation itself is delegated to a `reserve(code)` callable (the DAO
insert/update), which raises ShortCodeTakenError when the code is taken.
"""

import logging
from collections.abc import Callable

from simplelink.constants import Defaults
from simplelink.dao.base import LinkBaseDAO
from simplelink.dao.exceptions import ShortCodeTakenError
from simplelink.exceptions import AllocationExhaustedError, CollisionError
from simplelink.utils.shortener import generate_shortcode, validate_shortcode


logger = logging.getLogger(__name__)


class CodeAllocator:
    def __init__(
        self,
        link_dao: LinkBaseDAO,
        salt: str = Defaults.SHORTCODE_SALT,
        length: int = Defaults.SHORTCODE_LENGTH,
        max_attempts: int = Defaults.ALLOCATION_ATTEMPTS,
    ):
        self.link_dao = link_dao
        self.salt = salt
        self.length = length
        self.max_attempts = max_attempts

    def allocate[T](self, reserve: Callable[[str], T], requested_code: str | None = None) -> T:
        """Reserve a shortcode through `reserve` and return its result

        Args:
            reserve (Callable[[str], T]):
                Atomically claims the given code; raises ShortCodeTakenError on collision.
            requested_code (str | None):
                Custom shortcode chosen by the user, or None to generate one.

        Raises:
            ValidationError: If the requested code is malformed or reserved.
            CollisionError: If the requested code is already taken.
            AllocationExhaustedError: If every generated candidate collided.
        """
        if requested_code is not None:
            code = validate_shortcode(requested_code)
            try:
                return reserve(code)
            except ShortCodeTakenError as e:
                raise CollisionError('Custom code already taken') from e

        for attempt in range(1, self.max_attempts + 1):
            code = generate_shortcode(self.link_dao.count(increment=True), salt=self.salt, length=self.length)
            try:
                return reserve(code)
            except ShortCodeTakenError:
                # A custom shortcode occupies this generated slot, draw the next counter value
                logger.warning(
                    'Generated shortcode collided. Retrying.',
                    extra={'event': 'SHORTCODE_COLLISION', 'shortcode': code, 'attempt': attempt},
                )

        raise AllocationExhaustedError(f'Could not allocate a unique shortcode after {self.max_attempts} attempts')
