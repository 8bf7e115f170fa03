"""Unit tests for the seed_auth_secret.py CLI"""

import json
from unittest.mock import MagicMock

import pytest

import seed_auth_secret


class ResourceNotFoundException(Exception):
    pass


@pytest.fixture
def secrets_client():
    client = MagicMock()
    client.exceptions.ResourceNotFoundException = ResourceNotFoundException
    client.get_secret_value.side_effect = ResourceNotFoundException()
    return client


@pytest.fixture
def session(secrets_client):
    _session = MagicMock()
    _session.client.return_value = secrets_client
    return _session


def written_payload(call):
    return json.loads(call.kwargs['SecretString'])


def test_creates_secret(session, secrets_client, capsys):
    seed_auth_secret.main(['--app-name', 'simplelink', '--env', 'dev', '--tags', 'Owner=ops'], session=session)

    create = secrets_client.create_secret.call_args
    payload = written_payload(create)
    assert create.kwargs['Name'] == 'simplelink/dev/auth'
    assert {'Key': 'Owner', 'Value': 'ops'} in create.kwargs['Tags']
    assert len(payload['jwt_secret']) >= 32
    assert payload['admin_setup_token']

    out = capsys.readouterr().out
    assert payload['admin_setup_token'] in out
    assert payload['jwt_secret'] not in out


def test_update_keeps_jwt_secret(session, secrets_client):
    secrets_client.get_secret_value.side_effect = None
    secrets_client.get_secret_value.return_value = {'SecretString': json.dumps({'jwt_secret': 'existing-key'})}

    seed_auth_secret.main(['--app-name', 'simplelink', '--env', 'dev', '--no-admin-setup-token'], session=session)

    assert written_payload(secrets_client.put_secret_value.call_args) == {'jwt_secret': 'existing-key'}
    secrets_client.create_secret.assert_not_called()


def test_rotate_jwt_secret():
    payload = seed_auth_secret.build_payload({'jwt_secret': 'existing-key'}, rotate_jwt_secret=True)
    assert payload['jwt_secret'] != 'existing-key'


def test_dry_run_writes_nothing(session, secrets_client):
    seed_auth_secret.main(['--app-name', 'simplelink', '--env', 'dev', '--dry-run'], session=session)

    secrets_client.create_secret.assert_not_called()
    secrets_client.put_secret_value.assert_not_called()


def test_malformed_tags(session):
    with pytest.raises(ValueError, match='Malformed tag'):
        seed_auth_secret.main(['--app-name', 'simplelink', '--env', 'dev', '--tags', 'novalue'], session=session)
