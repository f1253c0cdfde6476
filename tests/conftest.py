# tests/conftest.py
"""
Fixtures compartilhados para testes do tomvar.

Este módulo define fixtures reutilizáveis que fornecem:
- diretórios de projeto temporários com documentos de configuração
- relógio controlado (determinístico)
- ambiente de processo isolado (dicionário, nunca `os.environ`)
- fábrica de caches apontando para o projeto temporário

Decisões arquiteturais:
    - Nenhuma fixture lê ou altera o ambiente real do processo
    - Documentos são escritos em `tmp_path`, isolados por teste
    - O cache é sempre criado com colaboradores explícitos

Invariantes:
    - Fixtures são seguras para execução em paralelo
    - Nenhuma fixture depende de estado global
"""

import os
import textwrap
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


class FakeClock:
    """Relógio manual: avança apenas quando `tick` é chamado."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def tick(self, seconds=1):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def env():
    """Ambiente isolado passado explicitamente ao resolvedor."""
    return {}


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    return root


@pytest.fixture
def write_doc(project: Path):
    """
    Fábrica que escreve um documento no projeto temporário.

    Aceita caminhos relativos com subdiretórios (ex.: "conf/app.toml") e
    remove a indentação comum do conteúdo.
    """

    def _write(name: str, content: str) -> Path:
        path = project / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


def bump_mtime(path: Path, seconds: int = 10) -> None:
    """Garante uma data de modificação estritamente maior que a atual."""
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def bump():
    return bump_mtime


@pytest.fixture
def make_cache(project: Path, env, clock):
    from tomvar.core.cache import ResolutionCache
    from tomvar.core.settings import ResolverSettings

    def _make(**settings_overrides):
        settings = ResolverSettings(root=project, **settings_overrides)
        return ResolutionCache(settings, environ=env, clock=clock)

    return _make


@pytest.fixture
def make_config(make_cache):
    from tomvar.accessors import Config

    def _make(**settings_overrides):
        return Config(cache=make_cache(**settings_overrides))

    return _make


@pytest.fixture
def store_of():
    """
    Fábrica de stores em memória, sem passar pelo disco.

    Recebe `{namespace: dados}` e localiza cada documento em
    "/cfg/<namespace>.toml".
    """
    from tomvar.core.store import Document, NamespacedStore
    from tomvar.core.tree import build_tree

    def _make(documents, skipped=None):
        docs = {
            ns: Document(location=Path(f"/cfg/{ns}.toml"), namespace=ns, tree=build_tree(data))
            for ns, data in documents.items()
        }
        return NamespacedStore(documents=docs, skipped=dict(skipped or {}))

    return _make
