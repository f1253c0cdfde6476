# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do tomvar.

Este módulo contém testes mínimos cujo único objetivo é garantir que:
- o pacote pode ser importado
- o ambiente de testes (pytest) está funcional
- a API pública exposta no pacote raiz continua disponível

Invariantes:
    - Estes testes devem sempre passar em um setup correto
    - Não dependem de filesystem, ambiente ou documentos de configuração

Limites explícitos:
    - Não testar lógica de resolução
    - Não acumular asserts funcionais
"""


def test_smoke():
    """
    Smoke test mínimo do repositório.

    Valida apenas que o pacote raiz importa sem falhas estruturais e que
    os nomes públicos documentados existem.
    """
    import tomvar

    for name in tomvar.__all__:
        assert hasattr(tomvar, name), name
