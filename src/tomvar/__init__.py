# src/tomvar/__init__.py
"""
tomvar — variáveis de configuração com referências e ambiente.

Resolve chaves pontuadas (ex.: `database.url`) a partir dos documentos de
configuração do projeto. Valores podem referenciar outras chaves
(`{{db.host}}`), inclusive de outros documentos (`{{app.db.host}}`), e
variáveis de ambiente com default (`{{ENV.PORT:-3000}}`).

Uso típico:
    from tomvar import Config

    config = Config()
    url = config.get("conn.url")
    port = config.get_int_or("server.port", 8080)

Arquitetura em alto nível:
    - tomvar.core       → descoberta, store, substituição, lookup e cache
    - tomvar.accessors  → conversões tipadas e defaults
"""

from .accessors import Config
from .core import (
    AmbiguousKey,
    CircularReference,
    DiscoveryFailure,
    InvalidValue,
    KeyNotFound,
    MalformedPlaceholder,
    ParseFailure,
    ResolutionCache,
    ResolverSettings,
    Result,
    TomvarError,
    UnresolvedReference,
)

__all__ = [
    "AmbiguousKey",
    "CircularReference",
    "Config",
    "DiscoveryFailure",
    "InvalidValue",
    "KeyNotFound",
    "MalformedPlaceholder",
    "ParseFailure",
    "ResolutionCache",
    "ResolverSettings",
    "Result",
    "TomvarError",
    "UnresolvedReference",
]
