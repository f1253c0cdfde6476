# tests/core/test_discovery.py
"""
Testes da descoberta e do carregamento de documentos.

Os testes asseguram que:
- a raiz do projeto é encontrada pelos marcadores
- entradas ocultas e excluídas nunca são descobertas
- cada formato suportado é carregado como dicionário
- falhas de parse são tipadas como `ParseFailure`

Limites explícitos:
    - Não valida namespaces (ver test_store.py)
    - Não valida substituição de placeholders
"""

import pytest

from tomvar.core.discovery import discover_documents, find_project_root, load_document
from tomvar.core.errors import DiscoveryFailure, ParseFailure
from tomvar.core.settings import ResolverSettings


def test_find_project_root_walks_up(project):
    nested = project / "a" / "b"
    nested.mkdir(parents=True)
    assert find_project_root(nested) == project.resolve()


def test_find_project_root_falls_back_to_start(tmp_path):
    start = tmp_path / "lonely"
    start.mkdir()
    assert find_project_root(start, markers=("no-such-marker",)) == start.resolve()


def test_discovery_skips_hidden_and_excluded(project, write_doc):
    write_doc("app.toml", "a = 1")
    write_doc("conf/db.toml", "b = 2")
    write_doc(".hidden.toml", "c = 3")
    write_doc(".secret/keys.toml", "d = 4")
    write_doc("venv/lib/site.toml", "e = 5")
    write_doc("notes.txt", "not config")

    found = discover_documents(project, ResolverSettings(root=project))

    assert [p.relative_to(project).as_posix() for p in found] == ["app.toml", "conf/db.toml"]


def test_discovery_respects_extensions(project, write_doc):
    write_doc("app.toml", "a = 1")
    write_doc("other.YAML", "b: 2")

    settings = ResolverSettings(root=project, extensions=(".toml", ".yaml"))
    found = discover_documents(project, settings)

    assert sorted(p.name for p in found) == ["app.toml", "other.YAML"]


def test_discovery_of_missing_root_fails(tmp_path):
    with pytest.raises(DiscoveryFailure):
        discover_documents(tmp_path / "missing")


@pytest.mark.parametrize(
    "name, content",
    [
        ("cfg.toml", '[db]\nhost = "localhost"\n'),
        ("cfg.yaml", "db:\n  host: localhost\n"),
        ("cfg.json", '{"db": {"host": "localhost"}}'),
    ],
)
def test_load_document_formats(write_doc, name, content):
    data = load_document(write_doc(name, content))
    assert data == {"db": {"host": "localhost"}}


def test_empty_document_is_empty_mapping(write_doc):
    assert load_document(write_doc("empty.yaml", "")) == {}


def test_invalid_toml_is_parse_failure(write_doc):
    path = write_doc("broken.toml", "[db\nhost = ")
    with pytest.raises(ParseFailure) as excinfo:
        load_document(path)
    assert excinfo.value.details["location"] == str(path)


def test_non_mapping_root_is_parse_failure(write_doc):
    with pytest.raises(ParseFailure):
        load_document(write_doc("list.yaml", "- a\n- b\n"))


def test_settings_from_env():
    settings = ResolverSettings.from_env({"TOMVAR_ROOT": "/srv/app", "TOMVAR_EXTENSIONS": "toml, YAML"})
    assert str(settings.root) == "/srv/app"
    assert settings.extensions == (".toml", ".yaml")


def test_settings_reject_unknown_extension():
    with pytest.raises(ValueError):
        ResolverSettings(extensions=(".ini",))
