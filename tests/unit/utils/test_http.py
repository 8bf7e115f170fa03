"""Unit tests for API Gateway request/response plumbing in http.py.

Test coverage includes:

1. Response builders
   - JSON, 204, 307 and error responses carry CORS headers.

2. Request parsing
   - JSON bodies (plain and base64), invalid JSON, non-object JSON.
   - Case-insensitive headers, path/query parameters, link id parsing.

3. service_errors_as_responses()
   - SimpleLinkError subclasses map to their HTTP status and error code.
   - Other exceptions propagate.
"""

import json
import base64

import pytest

from simplelink.exceptions import (
    AllocationExhaustedError,
    CollisionError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidJsonError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from simplelink.utils.http import (
    error_response,
    header,
    json_response,
    link_id_parameter,
    no_content,
    parse_json_body,
    query_parameter,
    redirect_307,
    service_errors_as_responses,
)


# -------------------------------
# 1. Response builders
# -------------------------------


def test_json_response():
    response = json_response(201, {'id': 1})
    assert response['statusCode'] == 201
    assert response['headers']['Content-Type'] == 'application/json'
    assert response['headers']['Access-Control-Allow-Origin'] == '*'
    assert json.loads(response['body']) == {'id': 1}


def test_no_content():
    response = no_content()
    assert response['statusCode'] == 204
    assert response['body'] == ''
    assert 'Access-Control-Allow-Methods' in response['headers']


def test_redirect_307():
    response = redirect_307(location='https://example.com')
    assert response['statusCode'] == 307
    assert response['headers']['Location'] == 'https://example.com'
    assert response['headers']['Cache-Control'] == 'no-store'


def test_error_response_carries_error_field():
    response = error_response(404, 'Link not found', 'NOT_FOUND')
    assert response['statusCode'] == 404
    assert json.loads(response['body']) == {'error': 'Link not found', 'errorCode': 'NOT_FOUND'}


# -------------------------------
# 2. Request parsing
# -------------------------------


def test_parse_json_body():
    assert parse_json_body({'body': '{"url": "https://example.com"}'}) == {'url': 'https://example.com'}


def test_parse_json_body_defaults_to_empty_object():
    assert parse_json_body({'body': None}) == {}


def test_parse_json_body_base64():
    encoded = base64.b64encode(b'{"email": "a@b.co"}').decode()
    assert parse_json_body({'body': encoded, 'isBase64Encoded': True}) == {'email': 'a@b.co'}


@pytest.mark.parametrize('body', ['{not json', '[1, 2]', '"string"', '42'])
def test_parse_json_body_rejects_invalid_bodies(body):
    with pytest.raises(InvalidJsonError):
        parse_json_body({'body': body})


def test_header_is_case_insensitive():
    event = {'headers': {'authorization': 'Bearer abc'}}
    assert header(event, 'Authorization') == 'Bearer abc'
    assert header({'headers': None}, 'Authorization') is None


def test_query_parameter():
    assert query_parameter({'queryStringParameters': {'source': 'twitter'}}, 'source') == 'twitter'
    assert query_parameter({'queryStringParameters': None}, 'source') is None


@pytest.mark.parametrize('raw, expected', [('1', 1), ('42', 42)])
def test_link_id_parameter(raw, expected):
    assert link_id_parameter({'pathParameters': {'id': raw}}) == expected


@pytest.mark.parametrize('path_parameters', [None, {}, {'id': 'abc'}, {'id': '0'}, {'id': '-1'}, {'id': '²'}])
def test_link_id_parameter_rejects_invalid_ids(path_parameters):
    with pytest.raises(NotFoundError):
        link_id_parameter({'pathParameters': path_parameters})


# -------------------------------
# 3. service_errors_as_responses()
# -------------------------------


@pytest.mark.parametrize(
    'error, status, code',
    [
        (ValidationError('bad url'), 400, 'VALIDATION_ERROR'),
        (InvalidJsonError('bad json'), 400, 'INVALID_JSON'),
        (CollisionError('taken'), 409, 'SHORT_CODE_TAKEN'),
        (AllocationExhaustedError('exhausted'), 409, 'ALLOCATION_EXHAUSTED'),
        (NotFoundError('missing'), 404, 'NOT_FOUND'),
        (UnauthorizedError('no token'), 401, 'UNAUTHORIZED'),
        (InvalidCredentialsError('bad login'), 401, 'INVALID_CREDENTIALS'),
        (ForbiddenError('not yours'), 403, 'FORBIDDEN'),
    ],
)
def test_service_errors_as_responses(error, status, code):
    @service_errors_as_responses
    def handler(event, context):
        raise error

    response = handler({'path': '/api/links'}, None)
    assert response['statusCode'] == status
    assert json.loads(response['body']) == {'error': str(error), 'errorCode': code}


def test_service_errors_as_responses_propagates_unexpected_errors():
    @service_errors_as_responses
    def handler(event, context):
        raise KeyError('boom')

    with pytest.raises(KeyError):
        handler({}, None)
