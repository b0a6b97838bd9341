"""
Event Publishers - Publicadores de Eventos de Domínio.

Responsável por publicar eventos para handlers assíncronos.
Implementações:
- LoggingEventPublisher: Loga e executa handlers no processo (modo sync)
- CeleryEventPublisher: Publica via Celery (produção)
- InMemoryEventPublisher: Para testes

Publicação é fire-and-forget: falhas são logadas e nunca
propagadas para quem alterou o chamado.
"""

from typing import List, Callable, Dict
import logging
import json

from chamados.core.shared.events import DomainEvent
from chamados.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class _HandlerRegistryMixin:
    """Handlers síncronos locais, indexados por tipo de evento."""

    def _init_handlers(self) -> None:
        self._handlers: Dict[str, List[Callable[[DomainEvent], None]]] = {}

    def register_handler(
        self,
        event_type: str,
        handler: Callable[[DomainEvent], None]
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error("Erro em handler para %s: %s", event.event_type, e)


class LoggingEventPublisher(_HandlerRegistryMixin, EventPublisher):
    """
    Publisher que loga eventos e executa os handlers locais registrados.

    Usado no modo sync: dispensa broker e worker, mas a notificação de
    resolução continua sendo enviada.
    """

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level
        self._init_handlers()

    def publish(self, event: DomainEvent) -> None:
        event_data = event.to_dict()

        logger.log(
            self._log_level,
            "[EVENT] %s | aggregate=%s | data=%s",
            event.event_type,
            event.aggregate_id,
            json.dumps(event_data, default=str),
        )

        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para Celery.

    Usado em produção para processamento assíncrono.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        event_data = event.to_dict()

        if self._also_log:
            logger.info(
                "[EVENT->CELERY] %s | aggregate=%s",
                event.event_type, event.aggregate_id,
            )

        try:
            from chamados.adapters.django_app.events.handlers import dispatch_domain_event
            dispatch_domain_event.delay(event.event_type, event_data)
        except Exception as e:
            logger.error("Falha ao publicar evento no Celery: %s", e, exc_info=True)


class InMemoryEventPublisher(_HandlerRegistryMixin, EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação em testes.
    """

    def __init__(self):
        self._published_events: List[DomainEvent] = []
        self._init_handlers()

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        mode: "sync" (loga e despacha handlers no processo),
            "celery" (worker assíncrono) ou "memory" (testes)
    """
    if mode == "celery":
        return CeleryEventPublisher()
    if mode == "memory":
        return InMemoryEventPublisher()
    if mode != "sync":
        logger.warning("EVENT_PUBLISHER_MODE desconhecido: %s; usando sync", mode)

    from chamados.adapters.django_app.events.handlers import notificar_resolucao_no_processo

    publisher = LoggingEventPublisher()
    publisher.register_handler("TicketResolvidoEvent", notificar_resolucao_no_processo)
    return publisher
