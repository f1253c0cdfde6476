# src/tomvar/core/hashing.py
"""
Hashing canônico do store resolvido.

O hash representa a identidade estrutural do conjunto de valores
resolvidos e é registrado nos eventos de reconstrução do cache, permitindo
distinguir uma reconstrução que mudou valores de uma que não mudou.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256

Invariantes:
    - Stores estruturalmente equivalentes produzem o mesmo hash
    - O valor é sempre uma string hexadecimal de 64 caracteres
"""

import hashlib
import json

from .store import NamespacedStore
from .tree import to_dict


def compute_store_hash(store: NamespacedStore) -> str:
    """Hash dos valores do store, indexados por namespace."""
    values = {ns: to_dict(tree) for ns, tree in store.trees.items()}
    canonical = json.dumps(values, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
