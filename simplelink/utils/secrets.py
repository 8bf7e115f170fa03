"""Resolve the authentication secret from AWS Secrets Manager.

The secret named by `AUTH_SECRET_NAME` is a JSON object:

    {
        "jwt_secret": "<HS256 signing key>",          (required)
        "admin_setup_token": "<one-time setup token>"  (optional)
    }

When `admin_setup_token` is present, the very first registration must present
it as `admin_token`. Use `seed_auth_secret.py` to generate and publish it.

When running locally, the Secrets Manager client targets LocalStack
(`LOCALSTACK_ENDPOINT`, default http://localhost:4566).
"""

import os
import json
import functools

import boto3
import botocore.exceptions

from simplelink.types import AuthSecret, SecretsManagerClient
from simplelink.constants import ENV
from simplelink.exceptions import BadConfigurationError, InfrastructureError, MalformedResponseError
from simplelink.utils.helpers import require_environment
from simplelink.utils.runtime import running_locally


@require_environment(ENV.Auth.SECRET_NAME)
def resolve_auth_secret(secrets_client: SecretsManagerClient | None = None) -> AuthSecret:
    """Fetch and validate the auth secret payload

    Raises:
        MissingEnvironmentVariableError: If AUTH_SECRET_NAME is not set.
        InfrastructureError: If Secrets Manager rejects the request.
        MalformedResponseError: If the secret is not a JSON object.
        BadConfigurationError: If `jwt_secret` is missing or empty.
    """
    secret_name = os.environ[ENV.Auth.SECRET_NAME]
    # fmt: off
    client_kwargs = {
        'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
    } if running_locally() else {}
    # fmt: on
    sm = secrets_client or boto3.client('secretsmanager', **client_kwargs)

    try:
        raw = sm.get_secret_value(SecretId=secret_name).get('SecretString')
    except botocore.exceptions.ClientError as e:
        raise InfrastructureError(f"Can't read secret '{secret_name}'") from e

    try:
        payload = json.loads(raw or '{}')
    except json.JSONDecodeError as e:
        raise MalformedResponseError('Invalid JSON in auth secret payload') from e
    if not isinstance(payload, dict):
        raise MalformedResponseError('Auth secret payload must be a JSON object')

    if not payload.get('jwt_secret'):
        raise BadConfigurationError('Auth secret must contain a non-empty "jwt_secret" field')

    secret: AuthSecret = {'jwt_secret': payload['jwt_secret']}
    if payload.get('admin_setup_token'):
        secret['admin_setup_token'] = payload['admin_setup_token']
    return secret


@functools.cache
def auth_secret() -> AuthSecret:
    """Process-wide cached variant of resolve_auth_secret() for Lambda handlers"""
    return resolve_auth_secret()
