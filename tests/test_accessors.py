# tests/test_accessors.py
"""
Testes dos acessores tipados (`tomvar.Config`).

Os testes asseguram que:
- `get_*` levanta o erro do core ou `InvalidValue`
- `get_*_or` devolve o default em qualquer falha
- os formatos de bool, duração e lista são interpretados como documentado
"""

from datetime import timedelta

import pytest

from tomvar import Config
from tomvar.accessors import (
    parse_bool,
    parse_duration,
    parse_float,
    parse_int,
    parse_int_list,
    split_list,
)
from tomvar.core.errors import InvalidValue, KeyNotFound


DOCUMENT = """
[server]
port = 3000
debug = "{{ENV.DEBUG:-no}}"
ratio = 0.75
timeout = "1m30s"
hosts = ["a.example", "b.example"]
ports = "80, 443,"
name = "api"
"""


@pytest.fixture
def config(make_config, write_doc):
    write_doc("app.toml", DOCUMENT)
    return make_config()


def test_typed_getters(config):
    assert config.get("server.name") == "api"
    assert config.get_int("server.port") == 3000
    assert config.get_bool("server.debug") is False
    assert config.get_float("server.ratio") == 0.75
    assert config.get_duration("server.timeout") == timedelta(seconds=90)
    assert config.get_list("server.hosts") == ["a.example", "b.example"]
    assert config.get_int_list("server.ports") == [80, 443]


def test_environment_flows_into_typed_value(make_config, write_doc, env):
    write_doc("app.toml", DOCUMENT)
    env["DEBUG"] = "YES"
    assert make_config().get_bool("server.debug") is True


def test_missing_key_raises_core_error(config):
    with pytest.raises(KeyNotFound):
        config.get_int("server.missing")


def test_invalid_value_names_key_and_type(config):
    with pytest.raises(InvalidValue) as excinfo:
        config.get_int("server.name")

    assert str(excinfo.value) == 'variable "server.name" is not a valid integer: api'
    assert excinfo.value.details["expected"] == "integer"


def test_defaulted_getters(config):
    assert config.get_or("server.missing", "fallback") == "fallback"
    assert config.get_int_or("server.name", 8) == 8
    assert config.get_int_or("server.port", 8) == 3000
    assert config.get_bool_or("server.missing", True) is True
    assert config.get_float_or("server.name", 1.0) == 1.0
    assert config.get_duration_or("server.missing", timedelta(seconds=5)) == timedelta(seconds=5)
    assert config.get_list_or("server.missing", ["x"]) == ["x"]
    assert config.get_int_list_or("server.hosts", [1]) == [1]


def test_exists(config):
    assert config.exists("server.port")
    assert not config.exists("server.missing")


def test_cache_and_settings_are_exclusive(make_cache):
    from tomvar.core.settings import ResolverSettings

    with pytest.raises(ValueError):
        Config(cache=make_cache(), settings=ResolverSettings())


# -----------------------------
# Conversores
# -----------------------------
@pytest.mark.parametrize("text, expected", [("42", 42), ("-7", -7), ("+3", 3)])
def test_parse_int(text, expected):
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", ["", "4.2", " 4", "1_000", "0x10", "\u0661\u0662", "\uff11"])
def test_parse_int_rejects(text):
    with pytest.raises(ValueError):
        parse_int(text)


@pytest.mark.parametrize(
    "text, expected",
    [("true", True), ("TRUE", True), ("1", True), ("yes", True), ("False", False), ("0", False), ("no", False)],
)
def test_parse_bool(text, expected):
    assert parse_bool(text) is expected


def test_parse_bool_rejects_other_text():
    with pytest.raises(ValueError):
        parse_bool("on")


def test_parse_float():
    assert parse_float("1e3") == 1000.0
    with pytest.raises(ValueError):
        parse_float("1_0.5")
    with pytest.raises(ValueError):
        parse_float("\u0661.5")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", timedelta(0)),
        ("300ms", timedelta(milliseconds=300)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("-2.5s", timedelta(seconds=-2.5)),
        ("10us", timedelta(microseconds=10)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "10", "1x", "h", "1h 30m", "-", "\u0663s"])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_lists():
    assert split_list("") == []
    assert split_list(" a , b,") == ["a", "b", ""]
    assert parse_int_list("1, 2,,3") == [1, 2, 3]
