"""
Configurações globais do Pytest para o sistema de Chamados.

Django é configurado pelo pytest-django (DJANGO_SETTINGS_MODULE no
pyproject.toml). As fixtures daqui montam o core com implementações
em memória: repositórios, unit of work com rollback por snapshot e
publisher que guarda os eventos.
"""

from datetime import datetime, timedelta, timezone

import pytest

from chamados.adapters.django_app.events.publishers import InMemoryEventPublisher
from chamados.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from chamados.core.tickets.entities import TicketEntity, TicketPriority, Usuario
from chamados.core.tickets.policies import TicketAccessPolicy
from chamados.core.tickets.ports import (
    InMemoryTicketLogRepository,
    InMemoryTicketRepository,
    InMemoryUsuarioRepository,
)
from chamados.core.tickets.use_cases import (
    AlterarStatusTicketService,
    AtualizarTicketService,
    CriarTicketService,
    ExcluirTicketService,
    ListarTicketsService,
    ObterTicketService,
)


# =============================================================================
# Usuários
# =============================================================================

@pytest.fixture
def admin():
    return Usuario(id="1", nome="Admin User", email="admin@example.com", is_admin=True)


@pytest.fixture
def solicitante():
    return Usuario(id="2", nome="Usuário Comum", email="user@example.com")


@pytest.fixture
def outro_usuario():
    return Usuario(id="3", nome="Outro Usuário", email="outro@example.com")


# =============================================================================
# Infraestrutura em memória
# =============================================================================

@pytest.fixture
def ticket_repo():
    return InMemoryTicketRepository()


@pytest.fixture
def log_repo():
    return InMemoryTicketLogRepository()


@pytest.fixture
def usuario_repo(admin, solicitante, outro_usuario):
    return InMemoryUsuarioRepository([admin, solicitante, outro_usuario])


@pytest.fixture
def event_publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def uow(event_publisher, ticket_repo, log_repo):
    """UoW que desfaz alterações dos repositórios em memória no rollback."""
    return InMemoryUnitOfWork(
        event_publisher=event_publisher,
        repositories=[ticket_repo, log_repo],
    )


@pytest.fixture
def policy():
    return TicketAccessPolicy()


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def criar_service(ticket_repo, usuario_repo, uow, policy):
    return CriarTicketService(ticket_repo, usuario_repo, uow, policy)


@pytest.fixture
def atualizar_service(ticket_repo, log_repo, usuario_repo, uow, policy):
    return AtualizarTicketService(ticket_repo, log_repo, usuario_repo, uow, policy)


@pytest.fixture
def alterar_status_service(ticket_repo, log_repo, usuario_repo, uow, policy):
    return AlterarStatusTicketService(ticket_repo, log_repo, usuario_repo, uow, policy)


@pytest.fixture
def listar_service(ticket_repo, usuario_repo):
    return ListarTicketsService(ticket_repo, usuario_repo)


@pytest.fixture
def obter_service(ticket_repo, log_repo, usuario_repo, policy):
    return ObterTicketService(ticket_repo, log_repo, usuario_repo, policy)


@pytest.fixture
def excluir_service(ticket_repo, uow, policy):
    return ExcluirTicketService(ticket_repo, uow, policy)


# =============================================================================
# Chamados
# =============================================================================

@pytest.fixture
def novo_ticket():
    """Factory de entidades válidas, com criado_em controlável."""
    base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def _criar(
        titulo="Impressora do financeiro travando",
        descricao="A impressora trava a cada três páginas impressas no setor.",
        solicitante_id="2",
        prioridade=TicketPriority.MEDIA,
        minutos=0,
    ):
        ticket = TicketEntity.criar(
            titulo=titulo,
            descricao=descricao,
            solicitante_id=solicitante_id,
            prioridade=prioridade,
        )
        ticket.criado_em = base + timedelta(minutes=minutos)
        return ticket

    return _criar


@pytest.fixture
def ticket_aberto(ticket_repo, novo_ticket):
    """Chamado ABERTO do solicitante (id "2"), já persistido."""
    ticket = novo_ticket()
    ticket_repo.save(ticket)
    return ticket
