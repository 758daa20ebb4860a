import pytest

from app.utils.sanitize import (
    filter_input,
    sanitize_bool,
    sanitize_currency,
    sanitize_host,
    sanitize_int,
    sanitize_message,
    sanitize_text,
)


@pytest.mark.parametrize("raw, expected", [
    ("US-D1", "usd"),
    ("EUR", "eur"),
    (" a e d ", "aed"),
    ("usd<script>", "usdscript"),
])
def test_sanitize_currency_keeps_lowercase_letters(raw, expected):
    """Test that only a-z survives currency sanitizing"""
    assert sanitize_currency(raw) == expected


@pytest.mark.parametrize("raw", ["US-D1", "usd", "E.U.R", "gbp  ", "123"])
def test_sanitize_currency_is_idempotent(raw):
    """Test that sanitizing twice gives the same result as once"""
    once = sanitize_currency(raw)
    assert sanitize_currency(once) == once


def test_sanitize_currency_defaults():
    """Test that missing or empty currencies fall back to usd"""
    assert sanitize_currency(None) == "usd"
    assert sanitize_currency("") == "usd"
    assert sanitize_currency("12-3") == "usd"


@pytest.mark.parametrize("raw, expected", [
    ("500", 500),
    (" 42 ", 42),
    ("12abc", 12),
    ("-5", -5),
    ("abc", 0),
    ("", 0),
    (None, 0),
    (7, 7),
])
def test_sanitize_int(raw, expected):
    """Test that non-numeric input coerces to 0"""
    assert sanitize_int(raw) == expected


def test_sanitize_text_strips_markup_and_whitespace():
    """Test that tags, script bodies and extra whitespace are removed"""
    assert sanitize_text("  <b>Hi</b>   there\n") == "Hi there"
    assert sanitize_text("<script>alert(1)</script>Consulting") == "Consulting"
    assert sanitize_text("100%25 off") == "100 off"
    assert sanitize_text(None) == ""


def test_sanitize_message_keeps_percent_sequences():
    """Test that messages lose markup but keep their %xx text"""
    assert sanitize_message("Invalid success_url: https://a/?q=%7Bx%7D") == "Invalid success_url: https://a/?q=%7Bx%7D"
    assert sanitize_message(" <i>100%25</i>\n off ") == "100%25 off"
    assert sanitize_message(None) == ""


@pytest.mark.parametrize("raw, expected", [
    ("true", True),
    ("TRUE", True),
    ("1", True),
    ("yes", True),
    ("on", True),
    ("false", False),
    ("0", False),
    ("", False),
    (None, False),
])
def test_sanitize_bool(raw, expected):
    assert sanitize_bool(raw) is expected


def test_sanitize_host():
    """Test that the port is dropped and the host lowercased"""
    assert sanitize_host("Shop.Example.TEST:8080") == "shop.example.test"
    assert sanitize_host("localhost") == "localhost"


def test_filter_input_defaults():
    """Test that every field falls back to its own default"""
    form = {"description": " <i>Consulting</i> ", "mode": None}

    assert filter_input(form, "description", "Custom Payment") == "Consulting"
    assert filter_input(form, "mode", "payment") == "payment"
    assert filter_input(form, "missing", "fallback") == "fallback"
    assert filter_input(None, "anything") == ""
