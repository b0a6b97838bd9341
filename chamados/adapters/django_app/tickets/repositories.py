"""
Repositórios Django para persistência de Chamados.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar TicketRepository, TicketLogRepository e UsuarioRepository
- Mapear entities para models e vice-versa
- Executar queries no banco via ORM
- Converter falhas do banco em PersistenceError

Princípios:
- Repository não contém lógica de negócio
- Usa Mapper para conversões
- Trata apenas persistência
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import Q

from chamados.core.shared.exceptions import PersistenceError
from chamados.core.tickets.dtos import ListarTicketsQueryDTO
from chamados.core.tickets.entities import TicketEntity, TicketLogEntity, Usuario

from .models import TicketModel, TicketLogModel
from .mappers import TicketMapper, TicketLogMapper, UsuarioMapper

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    Todas as leituras ignoram chamados com soft delete.

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket_entity)
        ticket = repo.get_by_id("uuid-here")
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste chamado (create ou update).

        Raises:
            PersistenceError: Se o banco recusar a gravação
        """
        logger.debug("Saving ticket: %s", ticket.id)

        try:
            model, _ = TicketModel.objects.update_or_create(
                id=ticket.id,
                defaults=self._mapper.to_defaults(ticket),
            )
        except DatabaseError as e:
            logger.error("Failed to save ticket %s: %s", ticket.id, e)
            raise PersistenceError(f"Falha ao gravar chamado {ticket.id}") from e

        ticket.atualizado_em = model.atualizado_em

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = TicketModel.objects.ativos().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug("Ticket not found: %s", ticket_id)
            return None
        return self._mapper.to_entity(model)

    def get_for_update(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca chamado com ``SELECT ... FOR UPDATE``.

        Deve ser chamado dentro de uma transação (DjangoUnitOfWork).
        """
        try:
            model = TicketModel.objects.select_for_update().ativos().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug("Ticket not found for update: %s", ticket_id)
            return None
        return self._mapper.to_entity(model)

    def list_paginated(
        self,
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        queryset = TicketModel.objects.ativos()

        if query.status is not None:
            queryset = queryset.filter(status=query.status.value)

        if query.prioridade is not None:
            queryset = queryset.filter(prioridade=query.prioridade.value)

        termo = query.termo_busca
        if termo:
            queryset = queryset.filter(
                Q(titulo__icontains=termo) | Q(descricao__icontains=termo)
            )

        queryset = queryset.order_by('-criado_em')

        total = queryset.count()
        models = queryset[query.offset:query.offset + query.por_pagina]

        return self._mapper.to_entity_list(models), total

    def exists(self, ticket_id: str) -> bool:
        return TicketModel.objects.ativos().filter(id=ticket_id).exists()

    def count(self) -> int:
        return TicketModel.objects.ativos().count()


class DjangoTicketLogRepository:
    """
    Implementação Django do TicketLogRepository.

    Só insere e lê: não há caminho de update nem delete.
    """

    def append(self, entry: TicketLogEntity) -> TicketLogEntity:
        """
        Raises:
            PersistenceError: Se o banco recusar a gravação
        """
        model = TicketLogMapper.to_model(entry)
        try:
            model.save(force_insert=True)
        except DatabaseError as e:
            logger.error("Failed to append log for ticket %s: %s", entry.ticket_id, e)
            raise PersistenceError(
                f"Falha ao gravar histórico do chamado {entry.ticket_id}"
            ) from e

        logger.debug(
            "Ticket log appended: %s %s -> %s",
            entry.ticket_id, model.de, model.para,
        )
        return TicketLogMapper.to_entity(model)

    def list_by_ticket(self, ticket_id: str) -> List[TicketLogEntity]:
        models = TicketLogModel.objects.filter(ticket_id=ticket_id).order_by('criado_em', 'id')
        return [TicketLogMapper.to_entity(model) for model in models]


class DjangoUsuarioRepository:
    """Diretório de usuários sobre ``django.contrib.auth``."""

    def _queryset(self):
        return get_user_model().objects.all()

    def get_by_id(self, usuario_id: str) -> Optional[Usuario]:
        if usuario_id is None:
            return None
        try:
            user = self._queryset().get(pk=usuario_id)
        except (get_user_model().DoesNotExist, ValueError, TypeError):
            return None
        return UsuarioMapper.to_entity(user)

    def get_many(self, usuario_ids: Iterable[str]) -> Dict[str, Usuario]:
        ids = {str(u) for u in usuario_ids if u is not None}
        if not ids:
            return {}
        try:
            users = list(self._queryset().filter(pk__in=ids))
        except (ValueError, TypeError):
            return {uid: u for uid in ids for u in [self.get_by_id(uid)] if u}
        return {str(user.pk): UsuarioMapper.to_entity(user) for user in users}

    def exists(self, usuario_id: str) -> bool:
        if usuario_id is None:
            return False
        try:
            return self._queryset().filter(pk=usuario_id).exists()
        except (ValueError, TypeError):
            return False
