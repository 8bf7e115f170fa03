"""Unit tests for the list_links Lambda"""

import json
from datetime import datetime, timedelta, UTC

import pytest

from simplelink.lambdas.list_links import app
from simplelink.models import LinkModel


class TestListLinksHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch, context, config, link_dao, api_event, bearer) -> None:
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'LinkRedisDAO', lambda *a, **kw: link_dao)

        now = datetime.now(UTC)
        for offset, (owner_id, code) in enumerate([(1, 'first'), (2, 'theirs'), (1, 'second')]):
            link_dao.insert(LinkModel(owner_id=owner_id, original_url=f'https://example.com/{code}', short_code=code, created_at=now + timedelta(seconds=offset)))

        self.context = context
        self.api_event = api_event
        self.bearer = bearer

    def test_lists_own_links_newest_first(self) -> None:
        response = app.lambda_handler(self.api_event('GET', '/api/links', headers=self.bearer(user_id=1)), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 200
        assert [link['short_code'] for link in body] == ['second', 'first']
        assert set(body[0]) == {'id', 'user_id', 'original_url', 'short_code', 'created_at', 'clicks'}

    def test_user_without_links(self) -> None:
        response = app.lambda_handler(self.api_event('GET', '/api/links', headers=self.bearer(user_id=3)), self.context)

        assert response['statusCode'] == 200
        assert json.loads(response['body']) == []

    def test_unauthenticated(self) -> None:
        response = app.lambda_handler(self.api_event('GET', '/api/links'), self.context)
        assert response['statusCode'] == 401
