from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Bearer token lifetime (24 hours)
    ONE_DAY = 86_400  # 60 * 60 * 24

    # First-user claim not yet sealed by a stored admin (5 minutes)
    BOOTSTRAP_CLAIM = 300


class Defaults:
    """Default service parameters (overridable via AppConfig)."""

    SHORTCODE_LENGTH = 7  # Length of generated shortcodes
    SHORTCODE_SALT = 'simplelink'  # Salt of the counter permutation
    ALLOCATION_ATTEMPTS = 5  # Generated shortcode collisions tolerated before giving up
    CLICK_PUBLISH_ATTEMPTS = 3  # Click stream publish retries before dropping the event
    AGGREGATION_BATCH_SIZE = 500  # Stream entries read per XREADGROUP call
    AGGREGATION_MAX_BATCHES = 20  # XREADGROUP calls per aggregation run
    BCRYPT_ROUNDS = 12  # bcrypt work factor
    TIMEZONE = 'UTC'  # Calendar day bucketing of click statistics
    CLICK_SOURCE = 'direct'  # Source label of clicks without a ?source= tag
    CONSUMER_GROUP = 'aggregator'
    CONSUMER_NAME = 'aggregate_clicks'


class Limits:
    """Input validation limits."""

    SHORTCODE_MAX_LENGTH = 32
    URL_MAX_LENGTH = 2048
    SOURCE_MAX_LENGTH = 64
    PASSWORD_MIN_LENGTH = 6
    PASSWORD_MAX_BYTES = 72  # bcrypt input limit


# Shortcodes that would shadow API or static routes
RESERVED_SHORTCODES = frozenset({'api', 'health', 'admin', 'static', 'assets'})


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class Auth(StrEnum):
        # Secrets Manager name holding JSON: {"jwt_secret": "...", "admin_setup_token": "..."}
        SECRET_NAME = 'AUTH_SECRET_NAME'  # noqa: S105

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
