"""Shared fixtures for Lambda handler tests

Handlers are exercised end to end against fakeredis-backed DAOs: each test
module patches its handler's `load_config` and DAO constructors, while the
auth secret is patched here for every handler.
"""

from typing import cast

import pytest

from simplelink.types import LambdaContext, LambdaConfiguration, LambdaEvent
from simplelink.models import UserModel
from simplelink.services import TokenCodec
from simplelink.lambdas import common


JWT_SECRET = 'test-jwt-secret-0123456789abcdef0123456789abcdef'


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, {'function_name': 'simplelink-test'})


@pytest.fixture
def config() -> LambdaConfiguration:
    # fmt: off
    return cast(LambdaConfiguration, {
        'redis': {'host': 'redis.test', 'port': 6379, 'db': 0},
        'shortener': {'salt': 'unit_test_salt', 'length': 7, 'max_attempts': 5},
        'analytics': {'timezone': 'UTC', 'batch_size': 100, 'max_batches': 5, 'publish_attempts': 2},
        'auth': {'token_ttl_seconds': 3600, 'bcrypt_rounds': 4},
    })
    # fmt: on


@pytest.fixture
def secret() -> dict[str, str]:
    return {'jwt_secret': JWT_SECRET}


@pytest.fixture(autouse=True)
def _patch_auth_secret(monkeypatch, secret):
    monkeypatch.setattr(common, 'auth_secret', lambda: secret)


@pytest.fixture
def bearer():
    """Build Authorization headers for arbitrary users"""
    codec = TokenCodec(JWT_SECRET)

    def _bearer(user_id: int = 1, email: str = 'owner@example.com', is_admin: bool = False) -> dict[str, str]:
        token = codec.issue(UserModel(id=user_id, email=email, password_hash='x', is_admin=is_admin))
        return {'Authorization': f'Bearer {token}'}

    return _bearer


@pytest.fixture
def api_event():
    """Build API Gateway proxy events"""

    def _api_event(
        method: str = 'GET',
        path: str = '/',
        body: str | None = None,
        headers: dict[str, str] | None = None,
        path_parameters: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
    ) -> LambdaEvent:
        # fmt: off
        return cast(LambdaEvent, {
            'httpMethod': method,
            'path': path,
            'headers': headers or {},
            'body': body,
            'isBase64Encoded': False,
            'pathParameters': path_parameters,
            'queryStringParameters': query,
            'requestContext': {'domainName': 'sho.rt', 'stage': 'Prod'},
        })
        # fmt: on

    return _api_event
