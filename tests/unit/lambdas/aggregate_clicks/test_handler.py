"""Unit tests for the aggregate_clicks Lambda"""

import json
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest

from simplelink.lambdas.aggregate_clicks import app
from simplelink.models import ClickEventModel, LinkModel
from simplelink.dao.exceptions import DataStoreError


class TestAggregateClicksHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch, context, config, link_dao, click_dao) -> None:
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'ClickRedisDAO', lambda *a, **kw: click_dao)

        self.link = link_dao.insert(LinkModel(owner_id=1, original_url='https://example.com', short_code='abc', created_at=datetime.now(UTC)))
        self.monkeypatch = monkeypatch
        self.context = context
        self.click_dao = click_dao

    def test_aggregates_clicks(self) -> None:
        for source in ('twitter', 'twitter', 'direct'):
            self.click_dao.publish(ClickEventModel(link_id=self.link.id, timestamp=datetime(2025, 12, 26, 9, tzinfo=UTC), source=source))

        response = json.loads(app.lambda_handler({}, self.context))

        assert response == {
            'status': 'success',
            'recorded': 3,
            'dropped': 0,
            'malformed': 0,
            'message': 'Aggregated 3 click events',
        }
        assert [(item.source, item.count) for item in self.click_dao.sources(self.link.id)] == [('twitter', 2), ('direct', 1)]
        assert [(item.date, item.clicks) for item in self.click_dao.daily(self.link.id)] == [('2025-12-26', 3)]

    def test_nothing_to_aggregate(self) -> None:
        response = json.loads(app.lambda_handler({}, self.context))

        assert response['status'] == 'success'
        assert response['recorded'] == 0

    def test_data_store_error(self) -> None:
        click_dao = MagicMock()
        click_dao.ensure_group.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")
        self.monkeypatch.setattr(app, 'ClickRedisDAO', lambda *a, **kw: click_dao)

        response = json.loads(app.lambda_handler({}, self.context))

        assert response == {
            'status': 'error',
            'message': 'Failed to aggregate click events',
            'reason': "Can't connect to Redis at redis.test:6379/0.",
            'error': 'DataStoreError',
        }
