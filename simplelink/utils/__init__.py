from simplelink.utils.config import app_env, app_name, app_prefix, load_config, redis_config
from simplelink.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from simplelink.utils.shortener import generate_shortcode, validate_shortcode
from simplelink.utils.secrets import auth_secret
from simplelink.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'validate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'redis_config',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'auth_secret',
    'initialize_logging',
]
