# src/tomvar/core/discovery.py
"""
Descoberta e carregamento de documentos de configuração.

Este módulo é responsável por localizar a raiz do projeto, enumerar os
documentos de configuração abaixo dela e carregar cada documento em um
dicionário validado estruturalmente.

Formatos suportados (v1):
    - TOML (.toml)          → `tomllib`
    - YAML (.yaml, .yml)    → PyYAML (`yaml.safe_load`)
    - JSON (.json)          → `json`

Princípios fundamentais:
    - A enumeração é determinística (caminhos ordenados)
    - Entradas ocultas nunca são consideradas
    - Falhas de parse são tipadas (`ParseFailure`) e nunca silenciosas

Invariantes:
    - `load_document` devolve sempre um dicionário
    - Documentos vazios são interpretados como dicionários vazios

Limites explícitos:
    - Não resolve placeholders
    - Não atribui namespaces
    - Não mantém cache
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml  # PyYAML

from .errors import DiscoveryFailure, discovery_failure, parse_failure
from .settings import ResolverSettings


def find_project_root(start: Optional[Path] = None, markers: Iterable[str] = ("pyproject.toml", ".git")) -> Path:
    """
    Sobe a partir de `start` até encontrar um diretório com algum marcador.

    Quando nenhum marcador é encontrado até a raiz do sistema de arquivos,
    o próprio `start` é devolvido.
    """
    current = (start or Path.cwd()).resolve()
    markers = tuple(markers)
    for directory in (current, *current.parents):
        if any((directory / marker).exists() for marker in markers):
            return directory
    return current


def discover_documents(root: Path, settings: Optional[ResolverSettings] = None) -> List[Path]:
    """
    Enumera os documentos de configuração abaixo de `root`.

    Política de descoberta:
        - Diretórios e arquivos cujo nome começa com "." são ignorados
        - Diretórios em `exclude_dirs` não são percorridos
        - Arquivos em `exclude_files` são ignorados
        - A extensão é comparada sem diferenciar maiúsculas

    Args:
        root (Path): Diretório raiz do projeto.
        settings (Optional[ResolverSettings]): Política de descoberta.

    Returns:
        List[Path]: Caminhos encontrados, em ordem lexicográfica.

    Raises:
        DiscoveryFailure: Se o diretório raiz não puder ser percorrido.
    """
    settings = settings or ResolverSettings()
    extensions = {ext.lower() for ext in settings.extensions}
    exclude_dirs = set(settings.exclude_dirs)
    exclude_files = set(settings.exclude_files)

    if not root.is_dir():
        raise discovery_failure(root=str(root), reason="not a directory")

    errors: List[OSError] = []
    found: List[Path] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=errors.append):
        # poda in-place: os.walk não desce nos diretórios removidos
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in exclude_dirs
        )
        for name in filenames:
            if name.startswith(".") or name in exclude_files:
                continue
            if Path(name).suffix.lower() in extensions:
                found.append(Path(dirpath) / name)

    if errors:
        raise discovery_failure(root=str(root), reason=str(errors[0]))

    return sorted(found)


def load_document(path: Path) -> Dict[str, Any]:
    """
    Carrega um documento de configuração e valida sua estrutura básica.

    Decisões arquiteturais:
        - O formato é determinado exclusivamente pela extensão
        - O conteúdo raiz deve ser um dicionário
        - Qualquer falha de leitura ou parse vira `ParseFailure`

    Args:
        path (Path): Caminho do documento.

    Returns:
        Dict[str, Any]: Conteúdo do documento.

    Raises:
        ParseFailure: Se o documento não puder ser lido ou interpretado.
    """
    suffix = path.suffix.lower()
    namespace = path.stem

    try:
        if suffix == ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)

        elif suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

        elif suffix == ".json":
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)

        else:
            raise parse_failure(
                location=str(path), namespace=namespace, reason=f"unsupported format {path.suffix!r}"
            )

    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise parse_failure(location=str(path), namespace=namespace, reason=str(e)) from e
    except OSError as e:
        raise parse_failure(location=str(path), namespace=namespace, reason=str(e)) from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise parse_failure(
            location=str(path),
            namespace=namespace,
            reason=f"root must be a mapping, got {type(data).__name__}",
        )

    return data


__all__ = ["find_project_root", "discover_documents", "load_document", "DiscoveryFailure"]
