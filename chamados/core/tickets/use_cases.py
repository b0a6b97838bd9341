"""
Use Cases (Application Services) do Domínio de Chamados.

Este módulo contém os casos de uso da aplicação, que orquestram
a lógica de negócio coordenando entidades, repositórios, política
de acesso e eventos.

Use Cases implementados:
- CriarTicketService: Abre novo chamado
- AtualizarTicketService: Atualização parcial (título, descrição,
  prioridade, responsável)
- AlterarStatusTicketService: Transição de status + log de auditoria
- ListarTicketsService: Lista chamados com filtros e paginação
- ObterTicketService: Detalhe do chamado com histórico
- ExcluirTicketService: Soft delete

Responsabilidades dos Use Cases:
- Verificar permissões (via TicketAccessPolicy)
- Coordenar entidades
- Gerenciar transações (via UoW)
- Disparar eventos de domínio
- Retornar DTOs de saída

O usuário que executa a operação é sempre recebido como parâmetro
explícito; nenhum use case consulta um "usuário atual" global.
"""

import logging
from typing import Dict, List, Optional

from chamados.core.shared.interfaces import UnitOfWork
from chamados.core.shared.exceptions import (
    EntityNotFoundError,
    InvalidEnumValueError,
    ValidationError,
)

from .ports import TicketRepository, TicketLogRepository, UsuarioRepository
from .entities import (
    TicketEntity,
    TicketLogEntity,
    TicketPriority,
    TicketStatus,
    Usuario,
)
from .policies import AcaoTicket, TicketAccessPolicy
from .dtos import (
    AlterarStatusInputDTO,
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ListarTicketsQueryDTO,
    PaginatedResultDTO,
    TicketOutputDTO,
)
from .events import (
    TicketAtualizadoEvent,
    TicketCriadoEvent,
    TicketExcluidoEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)

logger = logging.getLogger(__name__)


def _nao_encontrado(ticket_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(
        f"Chamado {ticket_id} não encontrado",
        entity_type="Ticket",
        entity_id=ticket_id,
    )


class _TicketOutputBuilder:
    """Monta o DTO de saída carregando usuários e, opcionalmente, o histórico."""

    def __init__(
        self,
        usuario_repo: UsuarioRepository,
        log_repo: Optional[TicketLogRepository] = None,
    ):
        self.usuario_repo = usuario_repo
        self.log_repo = log_repo

    def build(self, ticket: TicketEntity, incluir_logs: bool = True) -> TicketOutputDTO:
        logs = None
        if incluir_logs and self.log_repo is not None:
            logs = self.log_repo.list_by_ticket(ticket.id)

        ids = {ticket.solicitante_id, ticket.responsavel_id}
        ids.update(entry.usuario_id for entry in logs or [])
        usuarios = self.usuario_repo.get_many(i for i in ids if i)

        return TicketOutputDTO.from_entity(ticket, usuarios=usuarios, logs=logs)

    def build_many(self, tickets: List[TicketEntity]) -> List[TicketOutputDTO]:
        ids = set()
        for ticket in tickets:
            ids.add(ticket.solicitante_id)
            if ticket.responsavel_id:
                ids.add(ticket.responsavel_id)
        usuarios = self.usuario_repo.get_many(ids)
        return [TicketOutputDTO.from_entity(t, usuarios=usuarios) for t in tickets]


class CriarTicketService:
    """
    Use Case: Abrir um novo chamado.

    Fluxo:
    1. Verificar permissão de criação
    2. Converter prioridade e validar campos (todos os erros juntos)
    3. Criar entidade (status ABERTO, sem responsável, sem resolvido_em)
    4. Persistir via repositório
    5. Disparar evento TicketCriado

    Criação não gera entrada no log de status.

    Example:
        service = CriarTicketService(ticket_repo, usuario_repo, uow)
        output = service.execute(
            CriarTicketInputDTO(
                titulo="Impressora travando",
                descricao="A impressora do 2º andar trava em toda impressão",
                prioridade="ALTA",
            ),
            usuario,
        )
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        usuario_repo: UsuarioRepository,
        uow: UnitOfWork,
        policy: Optional[TicketAccessPolicy] = None,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.policy = policy or TicketAccessPolicy()
        self._output = _TicketOutputBuilder(usuario_repo)

    def execute(self, input_dto: CriarTicketInputDTO, usuario: Usuario) -> TicketOutputDTO:
        """
        Raises:
            PermissionDeniedError: Se usuário não pode criar
            ValidationError: Se dados inválidos (erros por campo)
        """
        self.policy.autorizar(AcaoTicket.CRIAR, usuario)

        erros = TicketEntity.validar_campos(
            titulo=input_dto.titulo if input_dto.titulo is not None else "",
            descricao=input_dto.descricao if input_dto.descricao is not None else "",
        )

        prioridade = None
        if input_dto.prioridade is None or not str(input_dto.prioridade).strip():
            erros["prioridade"] = ["A prioridade é obrigatória."]
        else:
            try:
                prioridade = TicketPriority.from_string(input_dto.prioridade)
            except InvalidEnumValueError as e:
                erros["prioridade"] = [e.message]

        if erros:
            raise ValidationError("Os dados informados são inválidos.", errors=erros)

        with self.uow:
            ticket = TicketEntity.criar(
                titulo=input_dto.titulo,
                descricao=input_dto.descricao,
                solicitante_id=usuario.id,
                prioridade=prioridade,
            )

            self.ticket_repo.save(ticket)

            self.uow.publish_event(
                TicketCriadoEvent(
                    aggregate_id=ticket.id,
                    solicitante_id=ticket.solicitante_id,
                    titulo=ticket.titulo,
                    prioridade=ticket.prioridade.value,
                )
            )

        logger.info("Chamado %s criado por usuário %s", ticket.id, usuario.id)
        return self._output.build(ticket, incluir_logs=False)


class AtualizarTicketService:
    """
    Use Case: Atualização parcial de um chamado.

    Ordem das verificações:
    1. Chamado existe (senão EntityNotFoundError)
    2. Usuário é solicitante ou admin (senão PermissionDeniedError)
    3. Se o responsável foi enviado e o usuário não é admin, a
       requisição inteira é negada antes de qualquer campo ser aplicado
    4. Todos os campos informados são validados; falhas são reunidas
       em um único ValidationError
    5. Campos aplicados e persistidos

    Status e resolvido_em nunca são alterados aqui.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        log_repo: TicketLogRepository,
        usuario_repo: UsuarioRepository,
        uow: UnitOfWork,
        policy: Optional[TicketAccessPolicy] = None,
    ):
        self.ticket_repo = ticket_repo
        self.usuario_repo = usuario_repo
        self.uow = uow
        self.policy = policy or TicketAccessPolicy()
        self._output = _TicketOutputBuilder(usuario_repo, log_repo)

    def execute(self, input_dto: AtualizarTicketInputDTO, usuario: Usuario) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe ou foi excluído
            PermissionDeniedError: Se usuário não pode atualizar ou
                tentou definir responsável sem ser admin
            ValidationError: Se algum campo informado é inválido
        """
        logger.debug(
            "Atualização do chamado %s (campos informados: %s)",
            input_dto.ticket_id, ", ".join(input_dto.campos_informados()),
        )

        with self.uow:
            ticket = self.ticket_repo.get_for_update(input_dto.ticket_id)
            if not ticket:
                raise _nao_encontrado(input_dto.ticket_id)

            self.policy.autorizar(AcaoTicket.ATUALIZAR, usuario, ticket)

            if input_dto.define_responsavel:
                self.policy.autorizar(AcaoTicket.DEFINIR_RESPONSAVEL, usuario, ticket)

            prioridade = self._validar(input_dto)

            alterados = ticket.atualizar(
                titulo=input_dto.titulo,
                descricao=input_dto.descricao,
                prioridade=prioridade,
            )
            if input_dto.define_responsavel and ticket.definir_responsavel(input_dto.responsavel_id):
                alterados.append("responsavel_id")

            self.ticket_repo.save(ticket)

            if alterados:
                self.uow.publish_event(
                    TicketAtualizadoEvent(
                        aggregate_id=ticket.id,
                        atualizado_por_id=usuario.id,
                        campos=alterados,
                    )
                )

        logger.info(
            "Chamado %s atualizado por usuário %s (campos: %s)",
            ticket.id, usuario.id, ", ".join(alterados) or "nenhum",
        )
        return self._output.build(ticket)

    def _validar(self, input_dto: AtualizarTicketInputDTO) -> Optional[TicketPriority]:
        erros: Dict[str, List[str]] = TicketEntity.validar_campos(
            titulo=input_dto.titulo,
            descricao=input_dto.descricao,
        )

        prioridade = None
        if input_dto.prioridade is not None:
            try:
                prioridade = TicketPriority.from_string(input_dto.prioridade)
            except InvalidEnumValueError as e:
                erros["prioridade"] = [e.message]

        if (
            input_dto.define_responsavel
            and input_dto.responsavel_id is not None
            and not self.usuario_repo.exists(input_dto.responsavel_id)
        ):
            erros["responsavel_id"] = ["O responsável selecionado não existe."]

        if erros:
            raise ValidationError("Os dados informados são inválidos.", errors=erros)
        return prioridade


class AlterarStatusTicketService:
    """
    Use Case: Transição de status (motor de transições).

    Fluxo, em uma única transação:
    1. Ler chamado com trava de linha (get_for_update)
    2. Verificar permissão (solicitante ou admin)
    3. Aplicar transição na entidade (regra de resolvido_em)
    4. Persistir chamado e gravar entrada de log (de, para, usuário)
    5. Enfileirar eventos; TicketResolvido quando o destino é RESOLVIDO

    Qualquer falha entre a gravação do status e a do log desfaz
    ambas. Eventos só são publicados após o commit, e falhas de
    publicação nunca chegam ao chamador.

    Não há restrição de grafo e transições para o mesmo status
    são registradas normalmente (de == para).

    Example:
        service = AlterarStatusTicketService(ticket_repo, log_repo, usuario_repo, uow)
        output = service.execute(
            AlterarStatusInputDTO(ticket_id=ticket.id, novo_status=TicketStatus.RESOLVIDO),
            usuario,
        )
        output.resolvido_em  # preenchido
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        log_repo: TicketLogRepository,
        usuario_repo: UsuarioRepository,
        uow: UnitOfWork,
        policy: Optional[TicketAccessPolicy] = None,
    ):
        self.ticket_repo = ticket_repo
        self.log_repo = log_repo
        self.uow = uow
        self.policy = policy or TicketAccessPolicy()
        self._output = _TicketOutputBuilder(usuario_repo, log_repo)

    def execute(self, input_dto: AlterarStatusInputDTO, usuario: Usuario) -> TicketOutputDTO:
        """
        Returns:
            DTO do chamado atualizado, com solicitante, responsável e
            histórico ordenado

        Raises:
            EntityNotFoundError: Se chamado não existe ou foi excluído
            PermissionDeniedError: Se usuário não é solicitante nem admin
            InvalidEnumValueError: Se novo_status não é um TicketStatus
            PersistenceError: Se o armazenamento falhar (nada é gravado)
        """
        with self.uow:
            ticket = self.ticket_repo.get_for_update(input_dto.ticket_id)
            if not ticket:
                raise _nao_encontrado(input_dto.ticket_id)

            self.policy.autorizar(AcaoTicket.ALTERAR_STATUS, usuario, ticket)

            novo_status = input_dto.novo_status
            if not isinstance(novo_status, TicketStatus):
                raise InvalidEnumValueError(
                    TicketStatus.mensagem_invalido(),
                    field="status",
                    value=novo_status,
                )

            status_anterior = ticket.alterar_status(novo_status)

            self.ticket_repo.save(ticket)
            self.log_repo.append(
                TicketLogEntity(
                    ticket_id=ticket.id,
                    de=status_anterior,
                    para=novo_status,
                    usuario_id=usuario.id,
                )
            )

            self.uow.publish_event(
                TicketStatusAlteradoEvent(
                    aggregate_id=ticket.id,
                    de=status_anterior.value,
                    para=novo_status.value,
                    usuario_id=usuario.id,
                )
            )
            if novo_status == TicketStatus.RESOLVIDO:
                self.uow.publish_event(
                    TicketResolvidoEvent(
                        aggregate_id=ticket.id,
                        solicitante_id=ticket.solicitante_id,
                        titulo=ticket.titulo,
                        resolvido_em=ticket.resolvido_em.isoformat(),
                        resolvido_por_id=usuario.id,
                    )
                )

        logger.info(
            "Chamado %s: %s -> %s por usuário %s",
            ticket.id, status_anterior.value, novo_status.value, usuario.id,
        )

        atualizado = self.ticket_repo.get_by_id(ticket.id) or ticket
        return self._output.build(atualizado)


class ListarTicketsService:
    """
    Use Case: Listar chamados com filtros e paginação.

    Filtros: status e prioridade exatos; busca por substring (sem
    diferenciar maiúsculas) no título OU na descrição. Ordenação do
    mais recente para o mais antigo. Excluídos nunca aparecem.

    Não usa UoW pois é operação de leitura.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        usuario_repo: UsuarioRepository,
        por_pagina_padrao: int = 15,
    ):
        self.ticket_repo = ticket_repo
        self.por_pagina_padrao = por_pagina_padrao
        self._output = _TicketOutputBuilder(usuario_repo)

    def execute(
        self,
        query: Optional[ListarTicketsQueryDTO] = None,
        usuario: Optional[Usuario] = None,
    ) -> PaginatedResultDTO:
        query = (query or ListarTicketsQueryDTO(por_pagina=self.por_pagina_padrao)).normalizado()
        logger.debug("Listando chamados: %s", query.to_dict())

        tickets, total = self.ticket_repo.list_paginated(query)

        return PaginatedResultDTO(
            items=self._output.build_many(tickets),
            total=total,
            pagina=query.pagina,
            por_pagina=query.por_pagina,
        )


class ObterTicketService:
    """
    Use Case: Obter detalhes de um chamado, com histórico de status.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        log_repo: TicketLogRepository,
        usuario_repo: UsuarioRepository,
        policy: Optional[TicketAccessPolicy] = None,
    ):
        self.ticket_repo = ticket_repo
        self.policy = policy or TicketAccessPolicy()
        self._output = _TicketOutputBuilder(usuario_repo, log_repo)

    def execute(self, ticket_id: str, usuario: Usuario) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe ou foi excluído
        """
        ticket = self.ticket_repo.get_by_id(ticket_id)
        if not ticket:
            raise _nao_encontrado(ticket_id)

        self.policy.autorizar(AcaoTicket.VISUALIZAR, usuario, ticket)
        return self._output.build(ticket)


class ExcluirTicketService:
    """
    Use Case: Excluir chamado (soft delete).

    O chamado deixa de aparecer em listagens e consultas, mas suas
    entradas de log continuam gravadas.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        policy: Optional[TicketAccessPolicy] = None,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.policy = policy or TicketAccessPolicy()

    def execute(self, ticket_id: str, usuario: Usuario) -> None:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe ou já foi excluído
            PermissionDeniedError: Se usuário não é solicitante nem admin
        """
        with self.uow:
            ticket = self.ticket_repo.get_for_update(ticket_id)
            if not ticket:
                raise _nao_encontrado(ticket_id)

            self.policy.autorizar(AcaoTicket.EXCLUIR, usuario, ticket)

            ticket.excluir()
            self.ticket_repo.save(ticket)

            self.uow.publish_event(
                TicketExcluidoEvent(
                    aggregate_id=ticket.id,
                    excluido_por_id=usuario.id,
                )
            )

        logger.info("Chamado %s excluído por usuário %s", ticket_id, usuario.id)
