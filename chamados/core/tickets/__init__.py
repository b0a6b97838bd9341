"""
Domínio de Chamados - Gerenciamento de Tickets de Suporte.

Este módulo contém toda a lógica de negócio relacionada a chamados:
- Entidades (TicketEntity, TicketLogEntity, Usuario, TicketStatus, TicketPriority)
- Política de acesso (TicketAccessPolicy)
- Use Cases (CriarTicket, AtualizarTicket, AlterarStatusTicket, ...)
- Domain Events (TicketCriado, TicketStatusAlterado, TicketResolvido, ...)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios)

Características do Domínio:
- Máquina de estados ABERTO / EM_ANDAMENTO / RESOLVIDO sem restrição de grafo
- resolvido_em preenchido se e somente se o chamado está RESOLVIDO
- Toda transição gravada no log de auditoria na mesma transação
- Notificação de resolução disparada somente após commit
"""

from .entities import (
    TicketEntity,
    TicketLogEntity,
    TicketStatus,
    TicketPriority,
    Usuario,
)
from .events import (
    TicketCriadoEvent,
    TicketAtualizadoEvent,
    TicketStatusAlteradoEvent,
    TicketResolvidoEvent,
    TicketExcluidoEvent,
)
from .dtos import (
    CriarTicketInputDTO,
    AtualizarTicketInputDTO,
    AlterarStatusInputDTO,
    ListarTicketsQueryDTO,
    TicketOutputDTO,
    TicketLogOutputDTO,
    UsuarioOutputDTO,
    PaginatedResultDTO,
)
from .policies import AcaoTicket, TicketAccessPolicy
from .ports import TicketRepository, TicketLogRepository, UsuarioRepository
from .use_cases import (
    CriarTicketService,
    AtualizarTicketService,
    AlterarStatusTicketService,
    ListarTicketsService,
    ObterTicketService,
    ExcluirTicketService,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketLogEntity",
    "TicketStatus",
    "TicketPriority",
    "Usuario",
    # Events
    "TicketCriadoEvent",
    "TicketAtualizadoEvent",
    "TicketStatusAlteradoEvent",
    "TicketResolvidoEvent",
    "TicketExcluidoEvent",
    # DTOs
    "CriarTicketInputDTO",
    "AtualizarTicketInputDTO",
    "AlterarStatusInputDTO",
    "ListarTicketsQueryDTO",
    "TicketOutputDTO",
    "TicketLogOutputDTO",
    "UsuarioOutputDTO",
    "PaginatedResultDTO",
    # Policy
    "AcaoTicket",
    "TicketAccessPolicy",
    # Ports
    "TicketRepository",
    "TicketLogRepository",
    "UsuarioRepository",
    # Use Cases
    "CriarTicketService",
    "AtualizarTicketService",
    "AlterarStatusTicketService",
    "ListarTicketsService",
    "ObterTicketService",
    "ExcluirTicketService",
]
