# tests/core/test_errors.py
"""
Testes do catálogo de erros, do tipo `Result` e do hashing do store.

Os testes asseguram que:
- erros são serializáveis e carregam um `kind` estável
- `MalformedPlaceholder` é um caso de `UnresolvedReference`
- `Result.unwrap` levanta o erro carregado (inclusive repetidamente)
- o hash do store depende apenas dos valores
"""

import pytest

from tomvar.core.errors import (
    MALFORMED_PLACEHOLDER,
    TomvarError,
    UnresolvedReference,
    key_not_found,
    malformed_placeholder,
)
from tomvar.core.hashing import compute_store_hash
from tomvar.core.result import Result


def test_error_to_dict():
    err = key_not_found(key="x.y", searched=["/cfg/a.toml"], available=["a.x.z"])
    data = err.to_dict()

    assert data["type"] == "KEY_NOT_FOUND"
    assert data["details"]["searched"] == ["/cfg/a.toml"]
    assert "Available variables:\n- a.x.z" in data["message"]


def test_malformed_is_a_permanent_unresolved_reference():
    err = malformed_placeholder(
        references=[{"key": "a.b", "placeholder": "{{ x y }}", "target": "{{ x y }}", "reason": "malformed"}],
        passes=1,
    )
    assert isinstance(err, UnresolvedReference)
    assert isinstance(err, TomvarError)
    assert err.kind == MALFORMED_PLACEHOLDER


def test_errors_are_immutable():
    err = key_not_found(key="k", searched=[], available=[])
    with pytest.raises(Exception):
        err.message = "other"


def test_result_unwrap():
    assert Result.success("v").unwrap() == "v"

    failure = Result.failure(key_not_found(key="k", searched=[], available=[]))
    assert not failure.ok
    for _ in range(2):
        with pytest.raises(TomvarError) as excinfo:
            failure.unwrap()
        assert excinfo.value is failure.error


def test_store_hash_ignores_key_order(store_of):
    first = compute_store_hash(store_of({"app": {"a": "1", "b": "2"}, "db": {"h": "x"}}))
    second = compute_store_hash(store_of({"db": {"h": "x"}, "app": {"b": "2", "a": "1"}}))

    assert first == second
    assert len(first) == 64


def test_store_hash_follows_values(store_of):
    first = compute_store_hash(store_of({"app": {"a": "1"}}))
    same = compute_store_hash(store_of({"app": {"a": "1"}}))
    other = compute_store_hash(store_of({"app": {"a": "2"}}))

    assert first == same
    assert first != other
