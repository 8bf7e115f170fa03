"""Plumbing shared by the authenticated API Lambdas

Decorators:
    authenticated(handler):
        Resolve the bearer token of the request into a PrincipalModel and pass
        it to the handler as its third argument. Responds 401 via
        service_errors_as_responses when the token is missing or invalid.

Functions:
    optional_string(body, field):
        Read an optional string field of a JSON body ('' counts as absent).
"""

import functools
from collections.abc import Callable

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.models import PrincipalModel
from simplelink.exceptions import ValidationError
from simplelink.services.auth import TokenCodec
from simplelink.utils.http import header
from simplelink.utils.secrets import auth_secret


def authenticated(handler: Callable[[LambdaEvent, LambdaContext, PrincipalModel], LambdaResponse]) -> Callable:
    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        tokens = TokenCodec(auth_secret()['jwt_secret'])
        principal = tokens.authenticate(header(event, 'Authorization'))
        return handler(event, context, principal)

    return wrapper


def optional_string(body: dict, field: str) -> str | None:
    """Read an optional string field of a JSON body, treating '' as absent

    Raises:
        ValidationError: If the field is present but not a string.
    """
    value = body.get(field)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value
