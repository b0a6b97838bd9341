"""
Domain Events do Domínio de Chamados.

Eventos disparados quando algo significativo acontece com um chamado.

Eventos:
- TicketCriadoEvent: Novo chamado aberto
- TicketAtualizadoEvent: Campos editáveis alterados
- TicketStatusAlteradoEvent: Transição de status registrada
- TicketResolvidoEvent: Chamado entrou em RESOLVIDO (gera notificação)
- TicketExcluidoEvent: Chamado excluído (soft delete)

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork somente após commit bem-sucedido.

    with uow:
        anterior = ticket.alterar_status(TicketStatus.RESOLVIDO)
        repo.save(ticket)
        uow.publish_event(TicketResolvidoEvent(...))

Os campos são tipos JSON (str, list) para que o evento atravesse
o broker do Celery sem conversões.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from chamados.core.shared.events import DomainEvent


@dataclass
class _TicketEvent(DomainEvent):
    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketCriadoEvent(_TicketEvent):
    """
    Evento: Chamado foi criado.

    Attributes:
        solicitante_id: ID de quem abriu o chamado
        titulo: Título do chamado
        prioridade: Valor da prioridade (ex: "ALTA")
    """

    solicitante_id: str = ""
    titulo: str = ""
    prioridade: str = ""


@dataclass
class TicketAtualizadoEvent(_TicketEvent):
    """
    Evento: Campos editáveis do chamado foram alterados.

    Attributes:
        atualizado_por_id: ID de quem alterou
        campos: Nomes dos campos efetivamente alterados
    """

    atualizado_por_id: str = ""
    campos: List[str] = field(default_factory=list)


@dataclass
class TicketStatusAlteradoEvent(_TicketEvent):
    """
    Evento: Transição de status registrada no log.

    Attributes:
        de: Status anterior
        para: Novo status
        usuario_id: Quem executou a transição
    """

    de: str = ""
    para: str = ""
    usuario_id: str = ""


@dataclass
class TicketResolvidoEvent(_TicketEvent):
    """
    Evento: Chamado foi resolvido.

    Disparado a cada entrada em RESOLVIDO (inclusive após reabertura).

    Handlers:
    - Notificar o solicitante por e-mail

    Attributes:
        solicitante_id: ID do solicitante (destinatário da notificação)
        titulo: Título do chamado
        resolvido_em: Momento da resolução (ISO 8601)
        resolvido_por_id: Quem marcou como resolvido
    """

    solicitante_id: str = ""
    titulo: str = ""
    resolvido_em: str = ""
    resolvido_por_id: Optional[str] = None


@dataclass
class TicketExcluidoEvent(_TicketEvent):
    """
    Evento: Chamado foi excluído (soft delete).

    Attributes:
        excluido_por_id: ID de quem excluiu
    """

    excluido_por_id: str = ""
