import pytest

from apcups_exporter.config import DEFAULT_NIS_PORT, Settings, parse_address


@pytest.mark.parametrize("address,expected", [
    ("ups.local:3552", ("ups.local", 3552)),
    ("ups.local", ("ups.local", DEFAULT_NIS_PORT)),
    (":3551", ("localhost", 3551)),
    ("[::1]:3552", ("::1", 3552)),
    ("[fe80::1]", ("fe80::1", DEFAULT_NIS_PORT)),
    ("  10.0.0.5:3551  ", ("10.0.0.5", 3551)),
])
def test_parse_address(address, expected):
    assert parse_address(address) == expected


@pytest.mark.parametrize("address,message", [
    ("", "must not be empty"),
    ("[::1:3551", "unterminated"),
    ("[::1]3551", "Invalid address"),
    ("ups.local:port", "Invalid port"),
    ("[::1]:port", "Invalid port"),
    ("ups.local:70000", "out of range"),
    ("ups.local:0", "out of range"),
])
def test_parse_address_invalid(address, message):
    with pytest.raises(ValueError, match=message):
        parse_address(address)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("APCUPS_UPS_HOST", "ups.local")
    monkeypatch.setenv("APCUPS_UPS_PORT", "3552")
    monkeypatch.setenv("APCUPS_STRICT_MEASUREMENTS", "true")
    settings = Settings()
    assert settings.ups_address == "ups.local:3552"
    assert settings.STRICT_MEASUREMENTS is True
