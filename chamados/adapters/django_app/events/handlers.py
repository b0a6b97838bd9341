"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados (sempre após o commit). No modo sync,
``notificar_resolucao_no_processo`` envia o e-mail no próprio processo.
Isso permite:

- Desacoplamento: quem resolve o chamado não conhece a notificação
- Resiliência: Retry automático em falhas de envio
- Nenhuma falha de entrega chega a quem alterou o chamado

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # Processar evento
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from chamados.core.shared.events import DomainEvent
from chamados.core.tickets.events import TicketResolvidoEvent

logger = logging.getLogger(__name__)


def _formatar_data(valor: Optional[str]) -> str:
    """ISO 8601 → "d/m/Y H:i" no fuso configurado."""
    if not valor:
        return ""
    momento = datetime.fromisoformat(valor)
    if timezone.is_aware(momento):
        momento = timezone.localtime(momento)
    return momento.strftime("%d/%m/%Y %H:%M")


def _notificacao_de_resolucao(evento: TicketResolvidoEvent) -> Dict[str, str]:
    """Argumentos de ``notify_user`` para o e-mail de chamado resolvido."""
    return {
        'user_id': evento.solicitante_id,
        'subject': f"Chamado #{evento.aggregate_id} foi resolvido",
        'message': (
            f"O chamado \"{evento.titulo}\" foi marcado como resolvido.\n"
            f"Resolvido em: {_formatar_data(evento.resolvido_em)}\n\n"
            "Obrigado por utilizar nosso sistema de chamados!"
        ),
    }


# =============================================================================
# Event Handlers - Chamados
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_resolvido(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para evento TicketResolvidoEvent.

    Ações:
    - Notificar o solicitante por e-mail

    Args:
        event_data: Evento serializado por ``DomainEvent.to_dict``
    """
    evento = TicketResolvidoEvent.from_dict(event_data)

    logger.info(
        "[HANDLER] TicketResolvido: %s | Solicitante: %s",
        evento.aggregate_id, evento.solicitante_id,
    )

    notify_user.delay(**_notificacao_de_resolucao(evento))


def notificar_resolucao_no_processo(event: DomainEvent) -> None:
    """
    Handler local do modo sync: envia o e-mail de resolução sem broker.

    Registrado no LoggingEventPublisher por ``get_event_publisher("sync")``.
    """
    evento = TicketResolvidoEvent.from_dict(event.to_dict())
    notify_user(**_notificacao_de_resolucao(evento))


@shared_task(bind=True, ignore_result=True)
def handle_ticket_status_alterado(self, event_data: Dict[str, Any]) -> None:
    """Registra a transição no log da aplicação."""
    data = event_data.get('data', {})
    logger.info(
        "[HANDLER] TicketStatusAlterado: %s | %s -> %s | usuário %s",
        event_data.get('aggregate_id'),
        data.get('de'),
        data.get('para'),
        data.get('usuario_id'),
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'TicketResolvidoEvent': handle_ticket_resolvido,
    'TicketStatusAlteradoEvent': handle_ticket_status_alterado,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Roteia eventos para os handlers apropriados. Eventos sem
    handler são apenas registrados.

    Args:
        event_type: Tipo do evento (ex: 'TicketResolvidoEvent')
        event_data: Dados do evento serializado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info("[DISPATCHER] Roteando %s para handler", event_type)
        handler.delay(event_data)
    else:
        logger.debug("[DISPATCHER] Nenhum handler para %s", event_type)


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=120,
    autoretry_for=(OSError,),
)
def notify_user(self, user_id: str, subject: str, message: str) -> bool:
    """
    Envia e-mail ao usuário.

    Falhas de SMTP (OSError) são reprocessadas pelo Celery.

    Returns:
        True se o e-mail foi entregue ao backend de e-mail
    """
    from chamados.adapters.django_app.tickets.repositories import DjangoUsuarioRepository

    usuario = DjangoUsuarioRepository().get_by_id(user_id)
    if usuario is None or not usuario.email:
        logger.warning("[NOTIFICATION] Usuário %s sem e-mail; notificação ignorada", user_id)
        return False

    corpo = f"Olá, {usuario.nome}!\n\n{message}"
    send_mail(
        subject,
        corpo,
        settings.DEFAULT_FROM_EMAIL,
        [usuario.email],
    )

    logger.info("[NOTIFICATION] E-MAIL para %s: %s", usuario.id, subject)
    return True
