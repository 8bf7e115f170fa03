"""Unit tests for the health_check Lambda"""

import json

from simplelink.lambdas.health_check import app
from simplelink.dao.exceptions import DataStoreError


def test_healthy(monkeypatch, context, config, link_dao):
    monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
    monkeypatch.setattr(app, 'LinkRedisDAO', lambda *a, **kw: link_dao)

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 200
    assert json.loads(response['body']) == 'Healthy'


def test_unhealthy(monkeypatch, context, config):
    def unreachable(*args, **kwargs):
        raise DataStoreError("Can't connect to Redis at redis.test:6379/0. Check the provided configuration parameters.")

    monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
    monkeypatch.setattr(app, 'LinkRedisDAO', unreachable)

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 503
    assert json.loads(response['body']) == 'Unhealthy'
