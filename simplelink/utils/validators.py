"""Server-side input validation.

Nothing the frontend validates is trusted: every URL, email, password and
source tag is checked again here before it reaches a DAO.
"""

import re
import urllib.parse

from simplelink.constants import Defaults, Limits
from simplelink.exceptions import ValidationError


EMAIL_PATTERN = re.compile(r'[^@\s]+@[^@\s]+\.[^@\s]+')


def validate_url(url: object) -> str:
    """Return `url` if it is an absolute http(s) URL with a host

    Raises:
        ValidationError: With the same messages the original API used.
    """
    if not isinstance(url, str) or not url:
        raise ValidationError('URL cannot be empty')
    if not url.startswith(('http://', 'https://')):
        raise ValidationError('URL must start with http:// or https://')
    if len(url) > Limits.URL_MAX_LENGTH:
        raise ValidationError(f'URL must be at most {Limits.URL_MAX_LENGTH} characters long')
    if any(ch.isspace() for ch in url):
        raise ValidationError('URL must not contain whitespace')

    try:
        components = urllib.parse.urlsplit(url)
        components.port  # raises on a malformed port
    except ValueError as e:
        raise ValidationError('URL is malformed') from e
    if not components.hostname:
        raise ValidationError('URL must contain a host')
    return url


def normalize_email(email: object) -> str:
    """Return the lower-cased, stripped email or raise ValidationError"""
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email.strip()):
        raise ValidationError('Invalid email address')
    return email.strip().lower()


def validate_password(password: object) -> str:
    if not isinstance(password, str) or len(password) < Limits.PASSWORD_MIN_LENGTH:
        raise ValidationError(f'Password must be at least {Limits.PASSWORD_MIN_LENGTH} characters long')
    if len(password.encode('utf-8')) > Limits.PASSWORD_MAX_BYTES:
        raise ValidationError(f'Password must be at most {Limits.PASSWORD_MAX_BYTES} bytes long')
    return password


def normalize_source(source: object) -> str:
    """Canonical click source label: stripped, truncated, 'direct' when empty"""
    if not isinstance(source, str):
        return Defaults.CLICK_SOURCE
    source = source.strip()[: Limits.SOURCE_MAX_LENGTH]
    return source or Defaults.CLICK_SOURCE
