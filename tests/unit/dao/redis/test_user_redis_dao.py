"""Unit tests for the UserRedisDAO

Test coverage includes:

1. Insertion behavior
   - Stores the user hash, the email index and the user index.
   - Duplicate emails raise EmailTakenError.
   - A failed write releases the email.

2. Retrieval behavior
   - By id and by email; missing users raise UserDoesNotExistError.

3. Counting and first-user bootstrap
   - count() reflects registered users.
   - claim_bootstrap() succeeds once (and again for the same email).
   - An unsealed claim expires; seal and release only act for the claimant.

4. Type checking and connectivity
"""

from unittest.mock import MagicMock

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from simplelink.models import UserModel
from simplelink.dao.exceptions import BootstrapClosedError, DataStoreError, EmailTakenError, UserDoesNotExistError
from simplelink.dao.redis import UserRedisDAO


TEST_PREFIX = 'testapp:test'


def make_user(email='admin@example.com', is_admin=False):
    return UserModel(email=email, password_hash='$2b$04$hash', is_admin=is_admin)


# -------------------------------
# 1. Insertion behavior
# -------------------------------


def test_insert(user_dao, fake_redis):
    user = user_dao.insert(make_user(is_admin=True))

    assert user.id == 1
    assert fake_redis.hgetall(f'{TEST_PREFIX}:users:1') == {
        'id': '1',
        'email': 'admin@example.com',
        'password_hash': '$2b$04$hash',
        'is_admin': '1',
    }
    assert fake_redis.get(f'{TEST_PREFIX}:users:email:admin@example.com') == '1'
    assert fake_redis.smembers(f'{TEST_PREFIX}:users:index') == {'1'}


def test_insert_duplicate_email(user_dao):
    user_dao.insert(make_user())

    with pytest.raises(EmailTakenError, match="Email 'admin@example.com' is already registered."):
        user_dao.insert(make_user())


def test_insert_failure_releases_email(user_dao, fake_redis, monkeypatch):
    pipeline = fake_redis.pipeline
    created = []

    def first_pipeline_fails(*args, **kwargs):
        pipe = pipeline(*args, **kwargs)
        if not created:
            pipe.execute = MagicMock(side_effect=redis.exceptions.ConnectionError('Connection reset by peer'))
        created.append(pipe)
        return pipe

    monkeypatch.setattr(fake_redis, 'pipeline', first_pipeline_fails)

    with pytest.raises(DataStoreError):
        user_dao.insert(make_user())

    assert not fake_redis.exists(f'{TEST_PREFIX}:users:email:admin@example.com')
    assert user_dao.insert(make_user()).email == 'admin@example.com'

    assert user_dao.count() == 1


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


@pytest.mark.parametrize('is_admin', [True, False])
def test_get(user_dao, is_admin):
    inserted = user_dao.insert(make_user(is_admin=is_admin))
    assert user_dao.get(inserted.id) == inserted


def test_get_by_email(user_dao):
    user_dao.insert(make_user('first@example.com'))
    second = user_dao.insert(make_user('second@example.com'))

    assert user_dao.get_by_email('second@example.com') == second


def test_get_missing_user(user_dao):
    with pytest.raises(UserDoesNotExistError, match="User with ID '5' does not exist."):
        user_dao.get(5)


def test_get_by_missing_email(user_dao):
    with pytest.raises(UserDoesNotExistError, match="User with email 'ghost@example.com' does not exist."):
        user_dao.get_by_email('ghost@example.com')


# -------------------------------
# 3. Counting and first-user bootstrap
# -------------------------------


def test_count(user_dao):
    assert user_dao.count() == 0
    user_dao.insert(make_user('a@example.com'))
    user_dao.insert(make_user('b@example.com'))
    assert user_dao.count() == 2


def test_claim_bootstrap_once(user_dao):
    user_dao.claim_bootstrap('admin@example.com')

    with pytest.raises(BootstrapClosedError):
        user_dao.claim_bootstrap('intruder@example.com')


def test_claim_bootstrap_is_reentrant_for_claimant(user_dao):
    user_dao.claim_bootstrap('admin@example.com')
    user_dao.claim_bootstrap('admin@example.com')


def test_claim_bootstrap_expires_until_sealed(user_dao, fake_redis):
    user_dao.claim_bootstrap('admin@example.com')
    assert 0 < fake_redis.ttl(f'{TEST_PREFIX}:users:bootstrap') <= 300

    assert user_dao.seal_bootstrap('admin@example.com') is True
    assert fake_redis.ttl(f'{TEST_PREFIX}:users:bootstrap') == -1


def test_seal_bootstrap_requires_claimant(user_dao, fake_redis):
    user_dao.claim_bootstrap('admin@example.com')

    assert user_dao.seal_bootstrap('intruder@example.com') is False
    assert fake_redis.ttl(f'{TEST_PREFIX}:users:bootstrap') > 0


def test_release_bootstrap_reopens_slot(user_dao):
    user_dao.claim_bootstrap('admin@example.com')

    assert user_dao.release_bootstrap('intruder@example.com') is False
    assert user_dao.bootstrap_claimed() is True

    assert user_dao.release_bootstrap('admin@example.com') is True
    assert user_dao.bootstrap_claimed() is False
    user_dao.claim_bootstrap('other@example.com')


def test_bootstrap_claimed(user_dao):
    assert user_dao.bootstrap_claimed() is False
    user_dao.claim_bootstrap('admin@example.com')
    assert user_dao.bootstrap_claimed() is True


# -------------------------------
# 4. Type checking and connectivity
# -------------------------------


@pytest.mark.parametrize('method, args', [('insert', ('admin@example.com',)), ('get', ('1',)), ('get_by_email', (1,)), ('claim_bootstrap', (None,))])
def test_invalid_parameter_types(user_dao, method, args):
    with pytest.raises(BeartypeCallHintParamViolation):
        getattr(user_dao, method)(*args)


@pytest.fixture
def broken_dao():
    client = MagicMock(spec=redis.Redis, connection_pool=MagicMock(connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0}))
    client.ping.return_value = True
    error = redis.exceptions.TimeoutError('Timeout reading from socket')
    for method in ('incr', 'get', 'set', 'hgetall', 'scard', 'exists', 'transaction'):
        getattr(client, method).side_effect = error
    return UserRedisDAO(redis_client=client, prefix=TEST_PREFIX)


@pytest.mark.parametrize(
    'method, args',
    [
        ('insert', (make_user(),)),
        ('get', (1,)),
        ('get_by_email', ('admin@example.com',)),
        ('count', ()),
        ('claim_bootstrap', ('admin@example.com',)),
        ('seal_bootstrap', ('admin@example.com',)),
        ('release_bootstrap', ('admin@example.com',)),
        ('bootstrap_claimed', ()),
    ],
)
def test_connection_errors(broken_dao, method, args):
    with pytest.raises(DataStoreError):
        getattr(broken_dao, method)(*args)
