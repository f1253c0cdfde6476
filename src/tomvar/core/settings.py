# src/tomvar/core/settings.py
"""
Configuração do próprio resolvedor.

Define onde procurar documentos, quais extensões considerar e os limites
da substituição. Os valores padrão reproduzem o comportamento esperado em
um projeto típico: arquivos `.toml` abaixo da raiz do projeto, ignorando
entradas ocultas e o próprio `pyproject.toml`.

Variáveis de ambiente reconhecidas por `from_env`:
    - TOMVAR_ROOT        → raiz explícita do projeto
    - TOMVAR_EXTENSIONS  → extensões separadas por vírgula (ex.: ".toml,.yaml")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".toml", ".yaml", ".yml", ".json")


@dataclass(frozen=True)
class ResolverSettings:
    root: Optional[Path] = None
    root_markers: Tuple[str, ...] = ("pyproject.toml", ".git")
    extensions: Tuple[str, ...] = (".toml",)
    exclude_files: Tuple[str, ...] = ("pyproject.toml",)
    exclude_dirs: Tuple[str, ...] = ("__pycache__", "node_modules", "venv")
    env_prefix: str = "ENV"
    max_passes: Optional[int] = None

    def __post_init__(self) -> None:
        unknown = [ext for ext in self.extensions if ext.lower() not in SUPPORTED_EXTENSIONS]
        if unknown:
            raise ValueError(f"Unsupported document extensions: {unknown}")
        if self.max_passes is not None and self.max_passes < 1:
            raise ValueError("max_passes must be >= 1")
        if not self.env_prefix:
            raise ValueError("env_prefix must be a non-empty string")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ResolverSettings":
        env = os.environ if environ is None else environ
        settings = cls(**overrides)

        root = env.get("TOMVAR_ROOT")
        if root and "root" not in overrides:
            settings = replace(settings, root=Path(root))

        raw = env.get("TOMVAR_EXTENSIONS")
        if raw and "extensions" not in overrides:
            exts = tuple(
                e if e.startswith(".") else f".{e}"
                for e in (part.strip().lower() for part in raw.split(","))
                if e
            )
            settings = replace(settings, extensions=exts)

        return settings
