"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- Converter TicketEntity ⇄ TicketModel
- Converter TicketLogEntity ⇄ TicketLogModel
- Converter django.contrib.auth User → Usuario

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from typing import List

from chamados.core.tickets.entities import (
    TicketEntity,
    TicketLogEntity,
    TicketStatus,
    TicketPriority,
    Usuario,
)

from .models import TicketModel, TicketLogModel


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    Responsável por:
    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    - to_entity_list(): List[Model] → List[Entity]
    """

    @staticmethod
    def to_model(entity: TicketEntity) -> TicketModel:
        """
        Converte TicketEntity para TicketModel.

        Note:
            Não chama .save() - deixa isso para o Repository
        """
        return TicketModel(
            id=entity.id,
            titulo=entity.titulo,
            descricao=entity.descricao,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            solicitante_id=entity.solicitante_id,
            responsavel_id=entity.responsavel_id,
            resolvido_em=entity.resolvido_em,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            excluido_em=entity.excluido_em,
        )

    @staticmethod
    def to_defaults(entity: TicketEntity) -> dict:
        """Campos graváveis, no formato de ``update_or_create(defaults=...)``."""
        return {
            'titulo': entity.titulo,
            'descricao': entity.descricao,
            'status': entity.status.value,
            'prioridade': entity.prioridade.value,
            'solicitante_id': entity.solicitante_id,
            'responsavel_id': entity.responsavel_id,
            'resolvido_em': entity.resolvido_em,
            'criado_em': entity.criado_em,
            'excluido_em': entity.excluido_em,
        }

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na criação original
        """
        return TicketEntity(
            id=model.id,
            titulo=model.titulo,
            descricao=model.descricao,
            status=TicketStatus(model.status),
            prioridade=TicketPriority(model.prioridade),
            solicitante_id=model.solicitante_id,
            responsavel_id=model.responsavel_id,
            resolvido_em=model.resolvido_em,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            excluido_em=model.excluido_em,
        )

    @staticmethod
    def to_entity_list(models: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]


class TicketLogMapper:
    """Mapper do log de auditoria (somente criação e leitura)."""

    @staticmethod
    def to_model(entity: TicketLogEntity) -> TicketLogModel:
        return TicketLogModel(
            ticket_id=entity.ticket_id,
            de=entity.de.value if entity.de else None,
            para=entity.para.value,
            usuario_id=entity.usuario_id,
        )

    @staticmethod
    def to_entity(model: TicketLogModel) -> TicketLogEntity:
        return TicketLogEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            de=TicketStatus(model.de) if model.de else None,
            para=TicketStatus(model.para),
            usuario_id=model.usuario_id,
            criado_em=model.criado_em,
        )


class UsuarioMapper:
    """Converte usuários do django.contrib.auth em Usuario."""

    @staticmethod
    def to_entity(user) -> Usuario:
        nome = user.get_full_name() or user.get_username()
        return Usuario(
            id=str(user.pk),
            nome=nome,
            email=user.email or "",
            is_admin=bool(user.is_staff or user.is_superuser),
        )
