#!/usr/bin/env python3
"""
Generate and publish the authentication secret to AWS Secrets Manager.

This script follows this procedure to publish the auth secret:
- Step 1: Read the current secret <AppName>/<env>/auth (if any)
- Step 2: Keep its jwt_secret, or generate a new one (first run / --rotate-jwt-secret)
- Step 3: Generate a fresh one-time admin setup token (unless --no-admin-setup-token)
- Step 4: Create or update the secret

CLI usage:
    $ python seed_auth_secret.py --app-name simplelink --env dev
    $ python seed_auth_secret.py --app-name simplelink --env prod --rotate-jwt-secret
    $ python seed_auth_secret.py --app-name simplelink --env dev --no-admin-setup-token
    $ python seed_auth_secret.py --app-name simplelink --env dev --dry-run
    $ python seed_auth_secret.py --app-name simplelink --env dev --aws-profile my-profile

Behavior:
    - Secret name: <AppName>/<env>/auth (set it as AUTH_SECRET_NAME of the Lambdas).
      Payload (SecretString):
        {"jwt_secret": "...", "admin_setup_token": "..."}
    - Rotating jwt_secret invalidates every bearer token already issued.
    - The admin setup token is printed once, since the first registration must
      present it as `admin_token`. The jwt_secret is never printed.
    - Create vs update:
        * If secret does not exist → create with tags (+ optional KMS key).
        * If secret exists → update value (PutSecretValue) and apply tags (TagResource).

Raises:
    ValueError: For malformed --tags input or a malformed existing secret.
    botocore.exceptions.BotoCoreError / ClientError: For AWS API failures.
"""

import argparse
import json
import secrets
from typing import Any

import boto3


JWT_SECRET_BYTES = 48
ADMIN_SETUP_TOKEN_BYTES = 24


def _normalize_user_tags(tag_str: str) -> list[dict[str, str]]:
    """Normalize a comma-separated tag string ("Key1=Val1,Key2=Val2") into AWS tag dicts.

    Raises:
        ValueError: if any tag entry is malformed (missing '=' or empty key).
    """
    tags: list[dict[str, str]] = []
    for raw in (tag_str or '').split(','):
        item = raw.strip()
        if not item:
            continue
        key, sep, value = item.partition('=')
        if not sep:
            raise ValueError(f"Malformed tag (expected key=value): '{item}'")
        if not key.strip():
            raise ValueError(f"Malformed tag (empty key): '{item}'")
        tags.append({'Key': key.strip(), 'Value': value.strip()})
    return tags


def _current_secret(sm_client, name: str) -> dict[str, Any] | None:
    """Return the current secret payload, or None if the secret does not exist."""
    try:
        raw = sm_client.get_secret_value(SecretId=name).get('SecretString') or '{}'
    except sm_client.exceptions.ResourceNotFoundException:
        return None

    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError(f"Secret '{name}' must hold a JSON object")
    return payload


def build_payload(current: dict[str, Any] | None, rotate_jwt_secret: bool = False, admin_setup_token: bool = True) -> dict[str, str]:
    """Compose the new secret payload from the current one"""
    jwt_secret = (current or {}).get('jwt_secret')
    if rotate_jwt_secret or not jwt_secret:
        jwt_secret = secrets.token_urlsafe(JWT_SECRET_BYTES)

    payload = {'jwt_secret': jwt_secret}
    if admin_setup_token:
        payload['admin_setup_token'] = secrets.token_urlsafe(ADMIN_SETUP_TOKEN_BYTES)
    return payload


def _create_or_update_secret(
    sm_client,
    name: str,
    payload: dict[str, str],
    exists: bool,
    tags: list[dict[str, str]] | None,
    kms_key_id: str | None,
) -> None:
    """Create or update the secret. Never prints the jwt_secret."""
    if not exists:
        kwargs = {'Name': name, 'SecretString': json.dumps(payload)}
        if kms_key_id:
            kwargs['KmsKeyId'] = kms_key_id
        if tags:
            kwargs['Tags'] = tags
        sm_client.create_secret(**kwargs)
        print(f"SecretsManager upsert name='{name}' keys={sorted(payload)} [created]")
    else:
        sm_client.put_secret_value(SecretId=name, SecretString=json.dumps(payload))
        print(f"SecretsManager upsert name='{name}' keys={sorted(payload)} [updated]")
        if tags:
            sm_client.tag_resource(SecretId=name, Tags=tags)


def main(argv: list[str] | None = None, session: boto3.Session | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='seed_auth_secret.py',
        description='Generate the JWT signing key and admin setup token and publish them to AWS Secrets Manager',
    )
    parser.add_argument('--app-name', required=True, help='Application name for the secret name prefix (e.g., simplelink)')
    parser.add_argument('--env', required=True, help='Deployment environment (e.g., dev, prod)')
    parser.add_argument('--rotate-jwt-secret', action='store_true', help='Generate a new jwt_secret (invalidates issued tokens)')
    parser.add_argument('--no-admin-setup-token', action='store_true', help='Leave the first registration unguarded')
    parser.add_argument('--tags', default='', help='Comma-separated tags to attach, e.g. "Owner=Pesho,Service=simplelink"')
    parser.add_argument('--dry-run', action='store_true', help='Preview actions without writing to AWS')
    parser.add_argument('--aws-profile', default=None, help='AWS shared config/credentials profile name to use')
    parser.add_argument('--kms-key-id', default=None, help='KMS key ID/ARN/alias for encrypting the secret')

    args = parser.parse_args(argv)

    name = f'{args.app_name}/{args.env}/auth'
    tags = [{'Key': 'App', 'Value': args.app_name}, {'Key': 'Env', 'Value': args.env}] + _normalize_user_tags(args.tags)

    if session is None:
        session = boto3.Session(profile_name=args.aws_profile) if args.aws_profile else boto3.Session()
    sm = session.client('secretsmanager')

    current = _current_secret(sm, name)
    payload = build_payload(current, rotate_jwt_secret=args.rotate_jwt_secret, admin_setup_token=not args.no_admin_setup_token)

    if args.dry_run:
        print('[DRY-RUN]', f"SecretsManager upsert name='{name}' keys={sorted(payload)} [{'update' if current is not None else 'create'}]")
        return

    _create_or_update_secret(sm, name, payload, exists=current is not None, tags=tags, kms_key_id=args.kms_key_id)

    if 'admin_setup_token' in payload:
        print(f"Admin setup token (use as admin_token of the first registration): {payload['admin_setup_token']}")


if __name__ == '__main__':
    main()
