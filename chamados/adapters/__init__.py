"""
Adapters Layer - Implementações de infraestrutura.

Implementam os Ports definidos no Core (repositórios, unit of work,
publicação de eventos) e expõem os use cases via HTTP.
"""
