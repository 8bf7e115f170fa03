"""Redis-based user DAO

Users are stored as hashes keyed by id, with a unique email -> id index
claimed via SET NX and a set of all user ids for counting.

The first-user bootstrap slot is a STRING holding the claimant's email:

    claim_bootstrap()    SET NX EX   claimed while the first registration runs
    seal_bootstrap()     PERSIST     closed for good once the admin is stored
    release_bootstrap()  DEL         reopened when storing the admin failed

An unsealed claim expires on its own, so a registration that died between
claim and insert cannot lock the slot.
"""

import logging
import dataclasses

import redis
from beartype import beartype

from simplelink.constants import TTL
from simplelink.models import UserModel
from simplelink.dao.base import UserBaseDAO
from simplelink.dao.redis.mixins import RedisClientMixin
from simplelink.dao.redis.helpers import handle_redis_connection_error, as_int
from simplelink.dao.exceptions import BootstrapClosedError, EmailTakenError, UserDoesNotExistError


logger = logging.getLogger(__name__)


class UserRedisDAO(RedisClientMixin, UserBaseDAO):
    @handle_redis_connection_error
    @beartype
    def insert(self, user: UserModel, **kwargs) -> UserModel:
        """Insert a user and claim its email

        The email is released again if the user record cannot be written.

        Raises:
            EmailTakenError:
                If the email is already registered.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        user_id = self.redis.incr(self.keys.user_counter_key())
        email_key = self.keys.user_email_key(user.email)
        if not self.redis.set(email_key, user_id, nx=True):
            raise EmailTakenError(f"Email '{user.email}' is already registered.")

        stored = dataclasses.replace(user, id=user_id)
        try:
            with self.redis.pipeline(transaction=True) as pipe:
                # fmt: off
                pipe.hset(self.keys.user_key(user_id), mapping={
                    'id': user_id,
                    'email': stored.email,
                    'password_hash': stored.password_hash,
                    'is_admin': int(stored.is_admin),
                })
                # fmt: on
                pipe.sadd(self.keys.user_index_key(), user_id)
                pipe.execute()
        except redis.exceptions.RedisError:
            self._release_email(email_key, user_id)
            raise
        return stored

    @handle_redis_connection_error
    @beartype
    def get(self, user_id: int, **kwargs) -> UserModel:
        data = self.redis.hgetall(self.keys.user_key(user_id))
        if not data:
            raise UserDoesNotExistError(f"User with ID '{user_id}' does not exist.")

        return UserModel(
            id=int(data['id']),
            email=data['email'],
            password_hash=data['password_hash'],
            is_admin=data['is_admin'] == '1',
        )

    @handle_redis_connection_error
    @beartype
    def get_by_email(self, email: str, **kwargs) -> UserModel:
        user_id = self.redis.get(self.keys.user_email_key(email))
        if user_id is None:
            raise UserDoesNotExistError(f"User with email '{email}' does not exist.")
        return self.get(int(user_id))

    @handle_redis_connection_error
    def count(self, **kwargs) -> int:
        return self.redis.scard(self.keys.user_index_key())

    @handle_redis_connection_error
    @beartype
    def claim_bootstrap(self, email: str, ttl: int = TTL.BOOTSTRAP_CLAIM, **kwargs) -> None:
        # The claimant itself may claim again, so a first registration that failed
        # after the claim can be retried.
        bootstrap_key = self.keys.bootstrap_key()
        if not self.redis.set(bootstrap_key, email, nx=True, ex=ttl) and self.redis.get(bootstrap_key) != email:
            raise BootstrapClosedError('The first-user bootstrap slot was already claimed.')

    @handle_redis_connection_error
    @beartype
    def seal_bootstrap(self, email: str, **kwargs) -> bool:
        return self._if_bootstrap_claimed_by(email, lambda pipe, key: pipe.persist(key))

    @handle_redis_connection_error
    @beartype
    def release_bootstrap(self, email: str, **kwargs) -> bool:
        return self._if_bootstrap_claimed_by(email, lambda pipe, key: pipe.delete(key))

    @handle_redis_connection_error
    def bootstrap_claimed(self, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.bootstrap_key()))

    def _if_bootstrap_claimed_by(self, email: str, command) -> bool:
        """Queue `command(pipe, key)` on the bootstrap key iff `email` holds the claim (compare-and-set)"""
        bootstrap_key = self.keys.bootstrap_key()

        def apply(pipe) -> bool:
            owned = pipe.get(bootstrap_key) == email
            pipe.multi()
            if owned:
                command(pipe, bootstrap_key)
            return owned

        return self.redis.transaction(apply, bootstrap_key, value_from_callable=True)

    def _release_email(self, email_key: str, user_id: int) -> None:
        """Drop an email claim whose user record was never written"""

        def apply(pipe) -> None:
            claimant = as_int(pipe.get(email_key), default=-1)
            committed = pipe.exists(self.keys.user_key(user_id))
            pipe.multi()
            if claimant == user_id and not committed:
                pipe.delete(email_key)

        try:
            self.redis.transaction(apply, email_key, self.keys.user_key(user_id))
        except redis.exceptions.RedisError:
            logger.warning('Failed to release email claim.', extra={'event': 'EMAIL_CLAIM_LEAKED', 'userId': user_id})
