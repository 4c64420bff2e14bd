"""
Tests for request resolution.
"""

import pytest

from page_capture.capture.request import (
    CaptureMode,
    MAX_HEIGHT,
    MAX_WIDTH,
    MIN_HEIGHT,
    MIN_WIDTH,
    resolve_request,
)
from page_capture.errors import InvalidRequest

SELECTORS = ("#capture", "main")


def resolve(**params):
    return resolve_request(params, default_url="https://default.test/", selectors=SELECTORS)


def test_defaults():
    """Missing parameters resolve to the documented defaults."""
    request = resolve()

    assert request.url == "https://default.test/"
    assert request.mode is CaptureMode.REGION
    assert (request.width, request.height) == (1200, 900)
    assert request.selectors == SELECTORS
    assert request.debug is False


def test_blank_url_uses_default():
    assert resolve(url="   ").url == "https://default.test/"


@pytest.mark.parametrize("w, h", [
    ("-50", "0"),
    ("100000", "100000"),
    ("319", "4001"),
    ("2401", "319"),
    (10**9, -(10**9)),
    ("1e6", "-1e6"),
])
def test_viewport_always_in_bounds(w, h):
    """Out-of-range sizes are clamped, never rejected."""
    request = resolve(w=w, h=h)

    assert MIN_WIDTH <= request.width <= MAX_WIDTH
    assert MIN_HEIGHT <= request.height <= MAX_HEIGHT


def test_clamps_to_edges():
    request = resolve(w="10", h="99999")
    assert (request.width, request.height) == (320, 4000)


@pytest.mark.parametrize("raw", ["abc", "", "12px", "nan", "inf", None])
def test_malformed_dimensions_use_defaults(raw):
    request = resolve(w=raw, h=raw)
    assert (request.width, request.height) == (1200, 900)


def test_float_dimensions_truncate():
    request = resolve(w="800.9", h=600.2)
    assert (request.width, request.height) == (800, 600)


def test_full_mode_has_no_selectors():
    request = resolve(mode="full")

    assert request.mode is CaptureMode.FULL
    assert request.selectors == ()


def test_mode_is_case_insensitive():
    assert resolve(mode=" FULL ").mode is CaptureMode.FULL


def test_invalid_mode_rejected():
    with pytest.raises(InvalidRequest) as excinfo:
        resolve(mode="thumbnail")
    assert "thumbnail" in excinfo.value.detail


def test_region_without_selectors_is_a_configuration_error():
    with pytest.raises(ValueError):
        resolve_request({"mode": "region"}, default_url="https://default.test/", selectors=())


@pytest.mark.parametrize("raw, expected", [
    ("1", True),
    ("true", True),
    ("0", False),
    ("", False),
    (None, False),
])
def test_debug_flag(raw, expected):
    assert resolve(debug=raw).debug is expected


def test_request_is_immutable():
    request = resolve()
    with pytest.raises(AttributeError):
        request.width = 500
