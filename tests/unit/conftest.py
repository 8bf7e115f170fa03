"""Shared fixtures for unit tests

fakeredis provides an in-process Redis (hashes, sorted sets, streams with
consumer groups, WATCH/MULTI) for DAO, service and scenario tests. Every test
gets its own FakeServer, i.e. an empty data store.
"""

import fakeredis
import pytest

from simplelink.dao.redis import ClickRedisDAO, LinkRedisDAO, UserRedisDAO
from simplelink.utils.secrets import auth_secret


TEST_PREFIX = 'testapp:test'
TEST_JWT_SECRET = 'test-jwt-secret-0123456789abcdef0123456789abcdef'


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(fake_server):
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture
def link_dao(fake_redis):
    return LinkRedisDAO(redis_client=fake_redis, prefix=TEST_PREFIX)


@pytest.fixture
def user_dao(fake_redis):
    return UserRedisDAO(redis_client=fake_redis, prefix=TEST_PREFIX)


@pytest.fixture
def click_dao(fake_redis):
    return ClickRedisDAO(redis_client=fake_redis, prefix=TEST_PREFIX)


@pytest.fixture(autouse=True)
def _clear_auth_secret_cache():
    """auth_secret() caches per process; never leak a secret between tests."""
    auth_secret.cache_clear()
    yield
    auth_secret.cache_clear()
