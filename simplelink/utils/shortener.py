"""Shortcode generation and validation

Generated shortcodes come from a global counter scrambled by a salted
multiplicative permutation over the fixed base62 space, so consecutive links do
not get consecutive codes. Requested (custom) shortcodes are validated against
the public shortcode grammar and the reserved route names.

Functions:
    generate_shortcode(counter, salt='default_salt', length=7, mult=1315423911):
        Generate a fixed-length base62 shortcode from a counter value.

    validate_shortcode(shortcode):
        Raise ValidationError unless the shortcode is a legal custom shortcode.

Example:
    >>> from simplelink.utils.shortener import generate_shortcode, validate_shortcode
    >>> generate_shortcode(12345, salt='my_secret')
    'Gh71WPT'
    >>> validate_shortcode('my-campaign_2025')
    'my-campaign_2025'
"""

import re
import math
import string

import xxhash

from simplelink.constants import Limits, RESERVED_SHORTCODES
from simplelink.exceptions import ValidationError


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)

SHORTCODE_PATTERN = re.compile(rf'[A-Za-z0-9_-]{{1,{Limits.SHORTCODE_MAX_LENGTH}}}')


def generate_shortcode(counter: int, salt: str = 'default_salt', length: int = 7, mult: int = 1315423911) -> str:
    """Generate a short, deterministic URL hash from a counter and salt.

    The counter is mapped through an affine permutation over BASE^length and
    then base62 encoded, which guarantees:
    - 1:1 mapping (bijective) while `counter < BASE**length`
    - Deterministic output
    - No visible sequential patterns

    Args:
        counter (int):
            Unique non-negative integer (the global shortcode counter).

        salt (str, optional):
            Secret string used to randomize the output space.

        length (int, optional):
            Length of the resulting shortcode. Defaults to 7.

        mult (int, optional):
            Multiplicative factor for the permutation.
            Must be coprime with mod (BASE**length).

    Returns:
        str: A `length`-character base62 shortcode.

    Raises:
        TypeError: If counter is not an int or salt is not a str.
        ValueError: If counter is negative, salt is empty or mult is not coprime with BASE**length.
    """
    if not isinstance(counter, int) or isinstance(counter, bool):
        raise TypeError(f'Counter must be of type integer (given type: {type(counter)}).')
    if counter < 0:
        raise ValueError(f'Counter must be a non-negative integer (given value: {counter}).')
    if not isinstance(salt, str):
        raise TypeError(f'Salt must be of type string (given type: {type(salt)}).')
    if not salt:
        raise ValueError(f'Salt must be a non-empty string (given value: {salt}).')
    if math.gcd(mult, BASE**length) != 1:
        raise ValueError(f'Multiplicative factor must be coprime with mod ({BASE**length}) (given value: mult={mult}).')

    # NOTE: collisions only occur after the counter wraps around the modulo
    #       space (62^7 ~ 3.5e12 codes for the default length). The allocator
    #       still retries, since a custom shortcode may occupy a generated slot.
    modulo_space = BASE**length
    salt_hash = xxhash.xxh64_intdigest(salt) % modulo_space
    permuted = (counter * mult + salt_hash) % modulo_space

    # Base62 encode, most significant digit first, padded to a fixed length
    return ''.join(reversed([ALPHABET[(permuted // BASE**i) % BASE] for i in range(length)])).rjust(length, ALPHABET[0])


def validate_shortcode(shortcode: object) -> str:
    """Validate a requested (custom) shortcode

    Returns:
        str: The shortcode, unchanged.

    Raises:
        ValidationError:
            If the shortcode is not 1-32 characters of [A-Za-z0-9_-], or is a
            reserved route name (compared case-insensitively).
    """
    if not isinstance(shortcode, str) or not SHORTCODE_PATTERN.fullmatch(shortcode):
        raise ValidationError(
            f'Custom code must be 1-{Limits.SHORTCODE_MAX_LENGTH} characters long '
            'and contain only letters, numbers, underscores, and hyphens'
        )
    if shortcode.lower() in RESERVED_SHORTCODES:
        raise ValidationError('This code is reserved and cannot be used')
    return shortcode
