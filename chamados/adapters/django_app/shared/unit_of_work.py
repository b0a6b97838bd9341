"""
Unit of Work - Implementação Django.

Gerencia transações atômicas entre múltiplos repositórios,
garantindo que a alteração de status e a entrada de log do chamado
sejam gravadas juntas ou não sejam gravadas.

Responsabilidades:
- Iniciar/finalizar transações
- Commit/Rollback coordenado
- Publicar eventos somente após commit bem-sucedido

ACID Guarantees:
- Atomicidade: Tudo ou nada
- Consistência: Eventos refletem estado persistido
- Isolamento: select_for_update serializa escritas no mesmo chamado
- Durabilidade: PostgreSQL garante
"""

from typing import Iterable, List, Optional
import logging

from django.db import DatabaseError, transaction

from chamados.core.shared.exceptions import PersistenceError
from chamados.core.shared.interfaces import EventPublisher, UnitOfWork
from chamados.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa ``transaction.atomic`` (aninhável: dentro de outro bloco
    atômico vira savepoint). A publicação de eventos é registrada com
    ``transaction.on_commit``, então só acontece quando o commit mais
    externo for concluído; em rollback os eventos são descartados.

    Example:
        with DjangoUnitOfWork(event_publisher) as uow:
            ticket_repo.save(ticket)
            log_repo.append(entry)
            uow.publish_event(TicketStatusAlteradoEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            ticket_repo.save(ticket)
            raise Exception("Erro!")
        # Rollback automático, nada gravado, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        using: Optional[str] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (Celery, logging, etc)
            using: Alias do banco (default: "default")
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Finaliza o bloco atômico e agenda a publicação dos eventos.

        Raises:
            PersistenceError: Se o banco recusar o commit
        """
        if self._atomic is None:
            logger.warning("Transaction already finalized")
            return

        events = list(self._events)
        self.clear_events()
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

        atomic, self._atomic = self._atomic, None
        try:
            atomic.__exit__(None, None, None)
        except DatabaseError as e:
            self._rolled_back = True
            logger.error("Commit failed: %s", e)
            raise PersistenceError(f"Falha ao gravar alterações: {e}") from e

        self._committed = True
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        self.clear_events()
        if self._atomic is None:
            return

        atomic, self._atomic = self._atomic, None
        try:
            transaction.set_rollback(True, using=self._using)
            atomic.__exit__(None, None, None)
            logger.debug("Transaction rolled back")
        except DatabaseError as e:
            logger.error("Rollback failed: %s", e)
        finally:
            self._rolled_back = True

    def _publish_events(self, events: Iterable[DomainEvent]) -> None:
        """
        Publica eventos após o commit.

        Falhas são registradas e nunca propagadas: a alteração já
        está gravada e não deve parecer falha para quem a fez.
        """
        for event in events:
            logger.info(
                "Publishing event: %s for aggregate %s",
                event.event_type, event.aggregate_id,
            )

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error("Failed to publish event %s: %s", event.event_type, e)

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Tira snapshot dos repositórios em memória ao iniciar a transação
    e o restaura no rollback, reproduzindo a atomicidade do banco.

    Example:
        uow = InMemoryUnitOfWork(repositories=[ticket_repo, log_repo])
        with uow:
            ticket_repo.save(ticket)
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        repositories: Iterable = (),
    ):
        super().__init__()
        self._event_publisher = event_publisher
        self._repositories = list(repositories)
        self._snapshots: List = []
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._snapshots = [repo.snapshot() for repo in self._repositories]

    def commit(self) -> None:
        self._committed = True
        self._snapshots = []
        events = list(self._events)
        self.clear_events()

        for event in events:
            self._published_events.append(event)
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error("Failed to publish event %s: %s", event.event_type, e)

    def rollback(self) -> None:
        for repo, state in zip(self._repositories, self._snapshots):
            repo.restore(state)
        self._snapshots = []
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return self._published_events

