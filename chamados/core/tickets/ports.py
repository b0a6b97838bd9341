"""
Ports (Interfaces) do Domínio de Chamados.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência e consulta de chamados, do log de status e de usuários.

Ports:
- TicketRepository: Armazenamento de chamados
- TicketLogRepository: Log de auditoria de status (append-only)
- UsuarioRepository: Diretório de usuários (somente leitura)

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Também contém implementações em memória, usadas nos testes do core
e em prototipagem.
"""

import copy
from datetime import datetime, timezone
from itertools import count
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .dtos import ListarTicketsQueryDTO
from .entities import TicketEntity, TicketLogEntity, Usuario


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Chamados.

    Chamados excluídos (soft delete) são invisíveis para todas as
    leituras deste port.

    Implementações:
    - DjangoTicketRepository (PostgreSQL via ORM)
    - InMemoryTicketRepository (para testes)
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste chamado (create ou update).

        Raises:
            PersistenceError: Se falha na persistência
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """Busca chamado não excluído por ID."""
        ...

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca chamado travando a linha até o fim da transação.

        Serializa transições concorrentes do mesmo chamado; chamados
        diferentes nunca disputam a mesma trava.
        """
        ...

    def list_paginated(
        self,
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        """
        Lista chamados filtrados, mais recentes primeiro.

        Returns:
            (itens da página, total sem paginação)
        """
        ...


@runtime_checkable
class TicketLogRepository(Protocol):
    """
    Interface para o log de auditoria de transições de status.

    Append-only: entradas nunca são alteradas nem removidas, nem
    mesmo quando o chamado é excluído.
    """

    def append(self, entry: TicketLogEntity) -> TicketLogEntity:
        """
        Grava nova entrada.

        Returns:
            Entrada com ``id`` e ``criado_em`` atribuídos pelo armazenamento
        """
        ...

    def list_by_ticket(self, ticket_id: str) -> List[TicketLogEntity]:
        """Histórico do chamado ordenado por (criado_em, id)."""
        ...


@runtime_checkable
class UsuarioRepository(Protocol):
    """Interface de leitura do diretório de usuários."""

    def get_by_id(self, usuario_id: str) -> Optional[Usuario]:
        ...

    def get_many(self, usuario_ids: Iterable[str]) -> Dict[str, Usuario]:
        """Busca vários usuários de uma vez (evita N+1)."""
        ...

    def exists(self, usuario_id: str) -> bool:
        ...


class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Guarda cópias das entidades, de modo que alterações feitas pelo
    chamador só valem depois de ``save``. Suporta snapshot/restore
    para o InMemoryUnitOfWork simular rollback.

    Example:
        repo = InMemoryTicketRepository()
        repo.save(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}

    def save(self, ticket: TicketEntity) -> None:
        self._tickets[ticket.id] = copy.deepcopy(ticket)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ticket = self._tickets.get(ticket_id)
        if ticket is None or ticket.esta_excluido:
            return None
        return copy.deepcopy(ticket)

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        return self.get_by_id(ticket_id)

    def list_paginated(
        self,
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        tickets = [t for t in self._tickets.values() if not t.esta_excluido]

        if query.status is not None:
            tickets = [t for t in tickets if t.status == query.status]
        if query.prioridade is not None:
            tickets = [t for t in tickets if t.prioridade == query.prioridade]

        termo = query.termo_busca
        if termo:
            termo = termo.lower()
            tickets = [
                t for t in tickets
                if termo in t.titulo.lower() or termo in t.descricao.lower()
            ]

        tickets.sort(key=lambda t: t.criado_em, reverse=True)
        pagina = tickets[query.offset:query.offset + query.por_pagina]
        return [copy.deepcopy(t) for t in pagina], len(tickets)

    def get_stored(self, ticket_id: str) -> Optional[TicketEntity]:
        """Leitura crua, incluindo excluídos (útil para testes)."""
        ticket = self._tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    def count(self) -> int:
        return len([t for t in self._tickets.values() if not t.esta_excluido])

    def snapshot(self) -> Dict[str, TicketEntity]:
        return copy.deepcopy(self._tickets)

    def restore(self, state: Dict[str, TicketEntity]) -> None:
        self._tickets = state


class InMemoryTicketLogRepository:
    """Implementação em memória do TicketLogRepository."""

    def __init__(self):
        self._entries: List[TicketLogEntity] = []
        self._ids = count(1)

    def append(self, entry: TicketLogEntity) -> TicketLogEntity:
        stored = TicketLogEntity(
            ticket_id=entry.ticket_id,
            de=entry.de,
            para=entry.para,
            usuario_id=entry.usuario_id,
            id=next(self._ids),
            criado_em=datetime.now(timezone.utc),
        )
        self._entries.append(stored)
        return stored

    def list_by_ticket(self, ticket_id: str) -> List[TicketLogEntity]:
        entries = [e for e in self._entries if e.ticket_id == ticket_id]
        return sorted(entries, key=lambda e: (e.criado_em, e.id))

    def count(self) -> int:
        return len(self._entries)

    def snapshot(self) -> List[TicketLogEntity]:
        return list(self._entries)

    def restore(self, state: List[TicketLogEntity]) -> None:
        self._entries = state


class InMemoryUsuarioRepository:
    """Implementação em memória do UsuarioRepository."""

    def __init__(self, usuarios: Iterable[Usuario] = ()):
        self._usuarios: Dict[str, Usuario] = {u.id: u for u in usuarios}

    def add(self, usuario: Usuario) -> Usuario:
        self._usuarios[usuario.id] = usuario
        return usuario

    def get_by_id(self, usuario_id: str) -> Optional[Usuario]:
        if usuario_id is None:
            return None
        return self._usuarios.get(str(usuario_id))

    def get_many(self, usuario_ids: Iterable[str]) -> Dict[str, Usuario]:
        return {
            uid: self._usuarios[uid]
            for uid in {str(u) for u in usuario_ids if u is not None}
            if uid in self._usuarios
        }

    def exists(self, usuario_id: str) -> bool:
        return usuario_id is not None and str(usuario_id) in self._usuarios
