from simplelink.dao.redis.redis_key_schema import RedisKeySchema
from simplelink.dao.redis.mixins import RedisClientMixin
from simplelink.dao.redis.link_redis_dao import LinkRedisDAO
from simplelink.dao.redis.user_redis_dao import UserRedisDAO
from simplelink.dao.redis.click_redis_dao import ClickRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'LinkRedisDAO',
    'UserRedisDAO',
    'ClickRedisDAO',
]
