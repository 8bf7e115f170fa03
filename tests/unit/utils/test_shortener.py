"""Unit tests for shortcode generation and validation in shortener.py.

Test coverage includes:

1. generate_shortcode() output format
   - Fixed length, base62 alphabet, determinism, salt sensitivity.

2. generate_shortcode() permutation properties
   - Consecutive counters map to distinct, non-sequential codes.
   - Counters wrap around the modulo space.

3. generate_shortcode() error handling
   - Invalid counter/salt types and values, non-coprime multipliers.

4. validate_shortcode()
   - Accepts the public grammar, rejects malformed and reserved codes.
"""

import string

import pytest

from simplelink.exceptions import ValidationError
from simplelink.utils.shortener import generate_shortcode, validate_shortcode


BASE62 = set(string.ascii_letters + string.digits)


# -------------------------------
# 1. Output format
# -------------------------------


@pytest.mark.parametrize('counter', [0, 1, 10**6, 2**63 - 1])
def test_generate_shortcode_has_fixed_length(counter):
    """Small and large counters always produce a 7-character base62 code."""
    result = generate_shortcode(counter, salt='edge_test')
    assert len(result) == 7
    assert set(result) <= BASE62


def test_generate_shortcode_respects_length():
    assert len(generate_shortcode(12345, salt='length_test', length=10)) == 10


def test_generate_shortcode_is_deterministic():
    assert generate_shortcode(123, salt='unit_test_salt') == generate_shortcode(123, salt='unit_test_salt')


def test_generate_shortcode_depends_on_salt():
    assert generate_shortcode(123, salt='unit_test_saltA') != generate_shortcode(123, salt='unit_test_saltB')


def test_known_output_regression():
    """Ensure stable output for known inputs (detect logic drift)."""
    assert generate_shortcode(12345, salt='my_secret', length=7) == 'Gh71WPT'


# -------------------------------
# 2. Permutation properties
# -------------------------------


def test_generate_shortcode_is_collision_free_for_consecutive_counters():
    codes = {generate_shortcode(counter, salt='bijective') for counter in range(1, 5001)}
    assert len(codes) == 5000


def test_generate_shortcode_does_not_look_sequential():
    first, second = generate_shortcode(1, salt='scramble'), generate_shortcode(2, salt='scramble')
    # Sequential encodings would only differ in the last character
    assert first[:-1] != second[:-1]


def test_generate_shortcode_wraps_around_modulo_space():
    assert generate_shortcode(12345, salt='my_secret') == generate_shortcode(62**7 + 12345, salt='my_secret')


# -------------------------------
# 3. Error handling
# -------------------------------


@pytest.mark.parametrize('counter', [None, 'abc', 12.34, True])
def test_invalid_counter_type_raises_error(counter):
    with pytest.raises(TypeError):
        generate_shortcode(counter, salt='unit_test_salt')


def test_negative_counter_raises_error():
    with pytest.raises(ValueError):
        generate_shortcode(-1, salt='unit_test_salt')


@pytest.mark.parametrize('salt', [None, 1, 12.34])
def test_invalid_salt_type_raises_error(salt):
    with pytest.raises(TypeError):
        generate_shortcode(100, salt=salt)


def test_empty_salt_raises_error():
    with pytest.raises(ValueError):
        generate_shortcode(100, salt='')


def test_non_coprime_multiplier_raises_error():
    with pytest.raises(ValueError, match='coprime'):
        generate_shortcode(100, salt='salt', mult=62)


# -------------------------------
# 4. validate_shortcode()
# -------------------------------


@pytest.mark.parametrize('shortcode', ['abc', 'my-campaign_2025', 'A', 'x' * 32, 'Health-check'])
def test_validate_shortcode_accepts_valid_codes(shortcode):
    assert validate_shortcode(shortcode) == shortcode


@pytest.mark.parametrize('shortcode', ['', 'x' * 33, 'has space', 'slash/code', 'dot.code', 'ünïcode', 'abc\n', None, 42])
def test_validate_shortcode_rejects_malformed_codes(shortcode):
    with pytest.raises(ValidationError, match='Custom code must be 1-32 characters long'):
        validate_shortcode(shortcode)


@pytest.mark.parametrize('shortcode', ['api', 'health', 'admin', 'static', 'assets', 'API', 'Admin'])
def test_validate_shortcode_rejects_reserved_codes(shortcode):
    with pytest.raises(ValidationError, match='reserved'):
        validate_shortcode(shortcode)
