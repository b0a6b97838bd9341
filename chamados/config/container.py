"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, policy, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Publisher: get_event_publisher(EVENT_PUBLISHER_MODE)
"""

from typing import Optional

from dependency_injector import containers, providers

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
from chamados.adapters.django_app.events.publishers import (
    InMemoryEventPublisher,
    get_event_publisher,
)
from chamados.adapters.django_app.shared.unit_of_work import (
    DjangoUnitOfWork,
    InMemoryUnitOfWork,
)
from chamados.adapters.django_app.tickets.repositories import (
    DjangoTicketLogRepository,
    DjangoTicketRepository,
    DjangoUsuarioRepository,
)


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Valores vindos do settings do Django
    - Infrastructure: Publisher de eventos
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = Container()
        container.config.from_dict({'event_publisher_mode': 'sync'})

        service = container.alterar_status_ticket_service()
        result = service.execute(input_dto, usuario)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        get_event_publisher,
        mode=config.event_publisher_mode,
    )

    access_policy = providers.Singleton(TicketAccessPolicy)

    # =========================================================================
    # Repositories (Singleton - stateless)
    # =========================================================================

    ticket_repository = providers.Singleton(DjangoTicketRepository)
    ticket_log_repository = providers.Singleton(DjangoTicketLogRepository)
    usuario_repository = providers.Singleton(DjangoUsuarioRepository)

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        DjangoUnitOfWork,
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services / Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    criar_ticket_service = providers.Factory(
        CriarTicketService,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    atualizar_ticket_service = providers.Factory(
        AtualizarTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    alterar_status_ticket_service = providers.Factory(
        AlterarStatusTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    # Leitura: sem UoW
    listar_tickets_service = providers.Factory(
        ListarTicketsService,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
        por_pagina_padrao=config.tickets_por_pagina.as_(int),
    )

    obter_ticket_service = providers.Factory(
        ObterTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        policy=access_policy,
    )

    excluir_ticket_service = providers.Factory(
        ExcluirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        policy=access_policy,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir, configurando a partir do settings do Django.
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict({
            'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
            'tickets_por_pagina': getattr(settings, 'TICKETS_POR_PAGINA', 15),
        })

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Container para testes com implementações em memória.

    O UnitOfWork restaura os repositórios em memória no rollback.

    Example:
        container = TestingContainer()
        container.usuario_repository().add(Usuario(id="1", is_admin=True))
        service = container.alterar_status_ticket_service()
    """

    event_publisher = providers.Singleton(InMemoryEventPublisher)
    access_policy = providers.Singleton(TicketAccessPolicy)

    ticket_repository = providers.Singleton(InMemoryTicketRepository)
    ticket_log_repository = providers.Singleton(InMemoryTicketLogRepository)
    usuario_repository = providers.Singleton(InMemoryUsuarioRepository)

    unit_of_work = providers.Factory(
        InMemoryUnitOfWork,
        event_publisher=event_publisher,
        repositories=providers.List(ticket_repository, ticket_log_repository),
    )

    criar_ticket_service = providers.Factory(
        CriarTicketService,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    atualizar_ticket_service = providers.Factory(
        AtualizarTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    alterar_status_ticket_service = providers.Factory(
        AlterarStatusTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
        policy=access_policy,
    )

    listar_tickets_service = providers.Factory(
        ListarTicketsService,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
    )

    obter_ticket_service = providers.Factory(
        ObterTicketService,
        ticket_repo=ticket_repository,
        log_repo=ticket_log_repository,
        usuario_repo=usuario_repository,
        policy=access_policy,
    )

    excluir_ticket_service = providers.Factory(
        ExcluirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        policy=access_policy,
    )
