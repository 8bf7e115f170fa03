"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to access
configuration data stored in **AWS AppConfig**. Each environment (`APP_ENV`) has
a dedicated AppConfig *Environment* within the shared AppConfig *Application*
identified by `APP_NAME`. Configuration data is stored as a JSON document under
a configuration profile (typically `backend-config`) and deployed to the
corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": {"host": "...", "port": 6379, "db": 0},
                "shortener": {"salt": "...", "length": 7, "max_attempts": 5}
            },
            "redirect_url": {
                "redis": { ... }
            },
            "aggregate_clicks": {
                "redis": { ... },
                "analytics": {"timezone": "Europe/Sofia", "batch_size": 500}
            },
            ...
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this AppConfig
document. The section must contain a block for the active backend.

Typical usage inside a Lambda handler:
    >>> from simplelink.utils.config import load_config, redis_config
    >>> config = load_config('shorten_url')
    >>> redis_config(config)
    {'redis_host': 'redis.internal', 'redis_port': 6379, 'redis_db': 0}
"""

import os
import json
import time
import urllib.parse
import urllib.request
import logging
import functools
from collections.abc import Callable

import boto3
import botocore.exceptions

from simplelink.types import AppConfig, LambdaConfiguration
from simplelink.constants import ENV
from simplelink.utils.helpers import require_environment
from simplelink.utils.runtime import running_locally
from simplelink.exceptions import AppConfigError, BadConfigurationError, MalformedResponseError


logger = logging.getLogger(__name__)

# Warm Lambda containers reuse the last fetched document for this many seconds
APPCONFIG_CACHE_SECONDS = 45


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs as <app name>:<app env>, or None if APP_NAME is unset"""
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _sam_load_local_appconfig(func: Callable[[], AppConfig]) -> Callable[[], AppConfig]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     - Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  - Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper() -> AppConfig:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func()

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)
        logger.debug('Loaded AppConfig from local agent.', extra={'build': document.get('build')})
        return document

    return wrapper


def cache_appconfig(func: Callable[[], AppConfig]) -> Callable[[], AppConfig]:
    """Decorator: keep the last AppConfig document in memory for APPCONFIG_CACHE_SECONDS

    Lambda containers are reused between invocations, so the redirect hot path
    does not pay an AppConfig round trip on every request. The cache lives in
    the wrapper and can be dropped with `wrapper.cache_clear()`.
    """
    cached: dict[str, tuple[float, AppConfig]] = {}

    @functools.wraps(func)
    def wrapper() -> AppConfig:
        entry = cached.get('document')
        if entry is not None and time.monotonic() - entry[0] < APPCONFIG_CACHE_SECONDS:
            return entry[1]

        document = func()
        cached['document'] = (time.monotonic(), document)
        return document

    wrapper.cache_clear = cached.clear
    return wrapper


@_sam_load_local_appconfig
@cache_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def fetch_appconfig_document() -> AppConfig:
    """Fetch the full configuration document from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       - AppConfig Application ID
        APPCONFIG_ENV_ID       - AppConfig Environment ID
        APPCONFIG_PROFILE_ID   - AppConfig Configuration Profile ID

    Raises:
        AppConfigError: If AppConfig rejects the request.
        MalformedResponseError: If the returned document is not valid JSON.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.')

    appconfig = boto3.client('appconfigdata')
    try:
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
    except botocore.exceptions.ClientError as e:
        raise AppConfigError('AppConfig request failed') from e

    try:
        document = json.loads(content.decode('utf-8'))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError('AppConfig returned a non-JSON document') from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'build': document.get('build')})
    return document


def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The lambda's config section as a Python dictionary.

    Raises:
        BadConfigurationError:
            If the document has no section for this lambda, or the section
            lacks a block for the active backend.

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis.internal'
    """
    document = fetch_appconfig_document()
    try:
        backend = document['active_backend']
        section = document['configs'][lambda_name]
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig has no '{lambda_name}' section") from e
    if backend not in section:
        raise BadConfigurationError(f"AppConfig section '{lambda_name}' has no '{backend}' block")

    logger.debug('Resolved lambda configuration.', extra={'lambdaName': lambda_name, 'backend': backend})
    return dict(section)


def redis_config(app_config: LambdaConfiguration) -> dict:
    """Translate a lambda's `redis` block into RedisClientMixin keyword arguments"""
    return {f'redis_{k}': v for k, v in app_config.get('redis', {}).items()}
