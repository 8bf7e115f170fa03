"""API Gateway (Lambda proxy integration) request and response plumbing.

Every HTTP Lambda in this project speaks the same wire format:

    - JSON bodies with `Content-Type: application/json`
    - CORS headers on every response (the React frontend is served separately)
    - error bodies shaped as {"error": "<message>", "errorCode": "<CODE>"}

Functions:
    json_response(status_code, body) -> LambdaResponse
    no_content() -> LambdaResponse
    redirect_307(location) -> LambdaResponse
    error_response(status_code, message, error_code) -> LambdaResponse
    service_error_response(error) -> LambdaResponse
    parse_json_body(event) -> JsonBody
    header(event, name) -> str | None
    path_parameter(event, name) -> str | None
    query_parameter(event, name) -> str | None
    link_id_parameter(event) -> int
    service_errors_as_responses(handler) -> Callable
"""

import json
import base64
import logging
import binascii
import functools
from typing import Any
from collections.abc import Callable

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse, HttpHeaders, JsonBody
from simplelink.exceptions import SimpleLinkError, InvalidJsonError, NotFoundError


logger = logging.getLogger(__name__)

# TODO: restrict Allow-Origin to the frontend domain once it is served from a fixed host
CORS_HEADERS: HttpHeaders = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Authorization,Content-Type',
    'Access-Control-Allow-Methods': 'OPTIONS,GET,POST,PATCH,DELETE',
}


def json_response(status_code: int, body: Any) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS},
        'body': json.dumps(body),
    }


def no_content() -> LambdaResponse:
    return {
        'statusCode': 204,
        'headers': dict(CORS_HEADERS),
        'body': '',
    }


def redirect_307(*, location: str) -> LambdaResponse:
    # No body and no caching: every hit must reach the dispatcher to be counted
    return {
        'statusCode': 307,
        'headers': {
            'Location': location,
            'Cache-Control': 'no-store',
            **CORS_HEADERS,
        },
        'body': '',
    }


def error_response(status_code: int, message: str, error_code: str) -> LambdaResponse:
    return json_response(status_code, {'error': message, 'errorCode': error_code})


def service_error_response(error: SimpleLinkError) -> LambdaResponse:
    return error_response(error.status_code, str(error) or error.__class__.__name__, error.error_code)


def parse_json_body(event: LambdaEvent) -> JsonBody:
    """Decode the request body of an API Gateway event into a JSON object

    Raises:
        InvalidJsonError:
            If the body is not valid JSON, or is valid JSON but not an object.
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        try:
            raw = base64.b64decode(raw).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise InvalidJsonError('Invalid JSON body') from e

    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidJsonError('Invalid JSON body') from e

    if not isinstance(body, dict):
        raise InvalidJsonError('JSON body must be an object')
    return body


def header(event: LambdaEvent, name: str) -> str | None:
    """Case-insensitive request header lookup"""
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def path_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('pathParameters') or {}).get(name)


def query_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('queryStringParameters') or {}).get(name)


def link_id_parameter(event: LambdaEvent) -> int:
    """Extract the numeric `{id}` path parameter of /api/links/{id}/... routes

    Raises:
        NotFoundError: If the parameter is missing or not a positive integer.
    """
    raw = path_parameter(event, 'id')
    if raw is None or not (raw.isascii() and raw.isdigit()) or int(raw) == 0:
        raise NotFoundError('Link not found')
    return int(raw)


def service_errors_as_responses(handler: Callable[[LambdaEvent, LambdaContext], LambdaResponse]) -> Callable:
    """Decorator: render SimpleLinkError raised by a handler as its HTTP error response

    Client errors (4xx) are logged at INFO level, server-side ones at ERROR level.
    Anything that is not a SimpleLinkError propagates (see guarantee_500_response).
    """

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        try:
            return handler(event, context)
        except SimpleLinkError as error:
            log = logger.info if error.status_code < 500 else logger.error
            log(
                'Request failed. Responding with %s.',
                error.status_code,
                extra={'event': error.error_code, 'reason': str(error), 'path': event.get('path')},
            )
            return service_error_response(error)

    return wrapper
