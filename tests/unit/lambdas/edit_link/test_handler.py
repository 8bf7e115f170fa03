"""Unit tests for the edit_link Lambda"""

import json
from datetime import datetime, UTC

import pytest

from simplelink.lambdas.edit_link import app
from simplelink.models import LinkModel


class TestEditLinkHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch, context, config, link_dao, api_event, bearer) -> None:
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'LinkRedisDAO', lambda *a, **kw: link_dao)

        now = datetime.now(UTC)
        self.link = link_dao.insert(LinkModel(owner_id=1, original_url='https://example.com', short_code='abc', created_at=now))
        link_dao.insert(LinkModel(owner_id=2, original_url='https://other.example', short_code='taken', created_at=now))

        self.context = context
        self.link_dao = link_dao
        self.api_event = api_event
        self.bearer = bearer

    def edit(self, payload, link_id=None, user_id=1):
        link_id = self.link.id if link_id is None else link_id
        # fmt: off
        event = self.api_event('PATCH', f'/api/links/{link_id}',
                               body=json.dumps(payload),
                               headers=self.bearer(user_id=user_id),
                               path_parameters={'id': str(link_id)})
        # fmt: on
        response = app.lambda_handler(event, self.context)
        return response['statusCode'], json.loads(response['body'])

    def test_edit_url(self) -> None:
        status, body = self.edit({'url': 'https://changed.example'})

        assert status == 200
        assert body['original_url'] == 'https://changed.example'
        assert self.link_dao.resolve('abc') == (self.link.id, 'https://changed.example')

    def test_edit_code(self) -> None:
        status, body = self.edit({'custom_code': 'xyz'})

        assert status == 200
        assert body['short_code'] == 'xyz'

    @pytest.mark.parametrize(
        'payload, link_id, user_id, expected_status, expected_code',
        [
            ({}, None, 1, 400, 'VALIDATION_ERROR'),
            ({'url': '', 'custom_code': ''}, None, 1, 400, 'VALIDATION_ERROR'),
            ({'url': 'javascript:alert(1)'}, None, 1, 400, 'VALIDATION_ERROR'),
            ({'custom_code': 'taken'}, None, 1, 409, 'SHORT_CODE_TAKEN'),
            ({'url': 'https://hijack.example'}, None, 2, 403, 'FORBIDDEN'),
            ({'url': 'https://example.com'}, 999, 1, 404, 'NOT_FOUND'),
            ({'url': 'https://example.com'}, 'abc', 1, 404, 'NOT_FOUND'),
        ],
    )
    def test_edit_errors(self, payload, link_id, user_id, expected_status, expected_code) -> None:
        status, body = self.edit(payload, link_id=link_id, user_id=user_id)

        assert status == expected_status
        assert body['errorCode'] == expected_code
        assert self.link_dao.resolve('abc') == (self.link.id, 'https://example.com')
