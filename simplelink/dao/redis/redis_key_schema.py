import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing data models.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "simplelink:prod" or "simplelink:dev".

    Key layout:
        links:<id>                  HASH    link record
        links:<id>:clicks           STRING  aggregated click counter
        links:<id>:clicks:daily     HASH    YYYY-MM-DD -> clicks
        links:<id>:sources          HASH    source -> clicks
        links:counter               STRING  link id sequence
        shortcodes:<code>           HASH    {id, url} shortcode index (redirect hot path)
        shortcodes:counter          STRING  generated shortcode sequence
        users:<id>                  HASH    user record
        users:<id>:links            ZSET    link ids scored by creation time
        users:email:<email>         STRING  email -> user id
        users:counter               STRING  user id sequence
        users:index                 SET     registered user ids
        users:bootstrap             STRING  first-user (admin) claim
        clicks:stream               STREAM  click events
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, link_id: int) -> str:
        return f'links:{link_id}'

    @prefix_key
    def link_clicks_key(self, link_id: int) -> str:
        return f'links:{link_id}:clicks'

    @prefix_key
    def link_daily_clicks_key(self, link_id: int) -> str:
        return f'links:{link_id}:clicks:daily'

    @prefix_key
    def link_sources_key(self, link_id: int) -> str:
        return f'links:{link_id}:sources'

    @prefix_key
    def link_counter_key(self) -> str:
        return 'links:counter'

    @prefix_key
    def shortcode_key(self, shortcode: str) -> str:
        return f'shortcodes:{shortcode}'

    @prefix_key
    def shortcode_counter_key(self) -> str:
        return 'shortcodes:counter'

    @prefix_key
    def user_key(self, user_id: int) -> str:
        return f'users:{user_id}'

    @prefix_key
    def user_links_key(self, user_id: int) -> str:
        return f'users:{user_id}:links'

    @prefix_key
    def user_email_key(self, email: str) -> str:
        return f'users:email:{email}'

    @prefix_key
    def user_counter_key(self) -> str:
        return 'users:counter'

    @prefix_key
    def user_index_key(self) -> str:
        return 'users:index'

    @prefix_key
    def bootstrap_key(self) -> str:
        return 'users:bootstrap'

    @prefix_key
    def click_stream_key(self) -> str:
        return 'clicks:stream'
