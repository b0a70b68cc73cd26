"""Tests for the static name and error tables."""

import pytest

from CRT571 import crt571_tables as T


def test_error_message_lookup():
    assert T.error_message("10") == "Card Jam"
    assert T.error_message("a1") == "Full-Stacker"


def test_unknown_error_code():
    assert T.error_message("7F") == ""
    assert T.error_message("") == ""


def test_every_command_has_parameter_names():
    assert set(T.COMMAND_NAMES) == set(T.PARAMETER_NAMES)


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        T.ERROR_MESSAGES["FF"] = "nope"
    with pytest.raises(TypeError):
        T.CARD_STATUS["ST0"][0x39] = "nope"


def test_describe_command():
    assert T.describe_command(0x32, 0x39) == "Card movement / Move card to gate"
    assert T.describe_command(0x99, 0x01) == "CM 0x99 / PM 0x01"
    assert T.describe_command(0x31, 0x7F) == "Inquire status / PM 0x7F"
