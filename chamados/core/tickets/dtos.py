"""
Data Transfer Objects (DTOs) do Domínio de Chamados.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de modelos internos (entidades) para camadas externas.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada já convertidos na borda (API)
- Output DTOs: Formatam dados para resposta (API)
- Query DTOs: Filtros e paginação de listagens

Tokens de status/prioridade chegam aqui já convertidos em enum;
a conversão (e a rejeição de valores desconhecidos) acontece na borda.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .entities import (
    TicketEntity,
    TicketLogEntity,
    TicketPriority,
    TicketStatus,
    Usuario,
)


def _iso(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar chamado.

    O solicitante não faz parte do DTO: é sempre o usuário que
    executa o use case.

    Attributes:
        titulo: Título do chamado
        descricao: Descrição detalhada
        prioridade: Token de prioridade (ex: "ALTA"), obrigatório
    """

    titulo: str
    descricao: str
    prioridade: Optional[str] = None


@dataclass(frozen=True)
class AtualizarTicketInputDTO:
    """
    DTO de entrada para atualização parcial de chamado.

    Campos com valor None não foram informados. Como o responsável
    pode ser removido (valor nulo), sua presença é indicada por
    ``define_responsavel``.

    Status não faz parte deste DTO: só muda via AlterarStatusTicketService.

    Attributes:
        ticket_id: ID do chamado
        titulo: Novo título (opcional)
        descricao: Nova descrição (opcional)
        prioridade: Token de prioridade (opcional)
        responsavel_id: Novo responsável (None remove)
        define_responsavel: Se o campo responsável foi enviado
    """

    ticket_id: str
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    prioridade: Optional[str] = None
    responsavel_id: Optional[str] = None
    define_responsavel: bool = False

    def campos_informados(self) -> List[str]:
        campos = [
            nome for nome in ("titulo", "descricao", "prioridade")
            if getattr(self, nome) is not None
        ]
        if self.define_responsavel:
            campos.append("responsavel_id")
        return campos


@dataclass(frozen=True)
class AlterarStatusInputDTO:
    """
    DTO de entrada para transição de status.

    Attributes:
        ticket_id: ID do chamado
        novo_status: Status desejado (já convertido na borda)
    """

    ticket_id: str
    novo_status: TicketStatus


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarTicketsQueryDTO:
    """
    DTO para parâmetros de busca/filtro de chamados.

    Filtros vazios (None ou string em branco) não restringem o resultado.

    Attributes:
        status: Filtrar por status exato
        prioridade: Filtrar por prioridade exata
        busca: Substring (sem diferenciar maiúsculas) em título ou descrição
        pagina: Número da página (1-indexed)
        por_pagina: Itens por página
    """

    status: Optional[TicketStatus] = None
    prioridade: Optional[TicketPriority] = None
    busca: Optional[str] = None
    pagina: int = 1
    por_pagina: int = 15

    MAX_POR_PAGINA = 100

    @property
    def termo_busca(self) -> Optional[str]:
        if self.busca is None or not self.busca.strip():
            return None
        return self.busca.strip()

    @property
    def offset(self) -> int:
        return (self.pagina - 1) * self.por_pagina

    def normalizado(self) -> "ListarTicketsQueryDTO":
        """Retorna cópia com página >= 1 e por_pagina entre 1 e 100."""
        return ListarTicketsQueryDTO(
            status=self.status,
            prioridade=self.prioridade,
            busca=self.termo_busca,
            pagina=max(1, int(self.pagina)),
            por_pagina=min(max(1, int(self.por_pagina)), self.MAX_POR_PAGINA),
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value if self.status else None,
            "prioridade": self.prioridade.value if self.prioridade else None,
            "busca": self.busca,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class UsuarioOutputDTO:
    """Referência a usuário exposta na API (sem flags de privilégio)."""

    id: str
    nome: str = ""
    email: str = ""

    @classmethod
    def from_usuario(cls, usuario: Usuario) -> "UsuarioOutputDTO":
        return cls(id=usuario.id, nome=usuario.nome, email=usuario.email)

    def to_dict(self) -> dict:
        return {"id": self.id, "nome": self.nome, "email": self.email}


@dataclass
class TicketLogOutputDTO:
    """Entrada do histórico de status, como exibida na API."""

    id: Optional[int]
    de: Optional[str]
    para: str
    usuario_id: str
    criado_em: Optional[datetime]
    usuario: Optional[UsuarioOutputDTO] = None

    @classmethod
    def from_entity(
        cls,
        entry: TicketLogEntity,
        usuario: Optional[Usuario] = None,
    ) -> "TicketLogOutputDTO":
        return cls(
            id=entry.id,
            de=entry.de.value if entry.de else None,
            para=entry.para.value,
            usuario_id=entry.usuario_id,
            criado_em=entry.criado_em,
            usuario=UsuarioOutputDTO.from_usuario(usuario) if usuario else None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "de": self.de,
            "para": self.para,
            "usuario_id": self.usuario_id,
            "usuario": self.usuario.to_dict() if self.usuario else None,
            "criado_em": _iso(self.criado_em),
        }


@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do chamado.

    ``logs`` é None quando o histórico não foi carregado (listagens)
    e uma lista ordenada por (criado_em, id) quando foi.

    Attributes:
        id: Identificador único
        titulo: Título
        descricao: Descrição
        status: Valor do enum (ex: "EM_ANDAMENTO")
        status_label: Rótulo de exibição (ex: "Em Andamento")
        prioridade: Valor do enum (ex: "ALTA")
        prioridade_label: Rótulo de exibição (ex: "Alta")
        solicitante_id: ID do solicitante
        responsavel_id: ID do responsável (se houver)
        solicitante: Dados do solicitante
        responsavel: Dados do responsável
        resolvido_em: Momento da última resolução
        criado_em: Data/hora de criação
        atualizado_em: Data/hora da última atualização
        logs: Histórico de transições
    """

    id: str
    titulo: str
    descricao: str
    status: str
    status_label: str
    prioridade: str
    prioridade_label: str
    solicitante_id: str
    responsavel_id: Optional[str]
    resolvido_em: Optional[datetime]
    criado_em: datetime
    atualizado_em: datetime
    solicitante: Optional[UsuarioOutputDTO] = None
    responsavel: Optional[UsuarioOutputDTO] = None
    logs: Optional[List[TicketLogOutputDTO]] = None

    @classmethod
    def from_entity(
        cls,
        entity: TicketEntity,
        usuarios: Optional[Dict[str, Usuario]] = None,
        logs: Optional[List[TicketLogEntity]] = None,
    ) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity
            usuarios: Usuários já carregados, indexados por ID
            logs: Histórico do chamado (None = não carregado)
        """
        usuarios = usuarios or {}

        def _ref(usuario_id: Optional[str]) -> Optional[UsuarioOutputDTO]:
            if usuario_id is None:
                return None
            usuario = usuarios.get(usuario_id)
            if usuario is None:
                return UsuarioOutputDTO(id=usuario_id)
            return UsuarioOutputDTO.from_usuario(usuario)

        return cls(
            id=entity.id,
            titulo=entity.titulo,
            descricao=entity.descricao,
            status=entity.status.value,
            status_label=entity.status.label,
            prioridade=entity.prioridade.value,
            prioridade_label=entity.prioridade.label,
            solicitante_id=entity.solicitante_id,
            responsavel_id=entity.responsavel_id,
            resolvido_em=entity.resolvido_em,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            solicitante=_ref(entity.solicitante_id),
            responsavel=_ref(entity.responsavel_id),
            logs=None if logs is None else [
                TicketLogOutputDTO.from_entity(entry, usuarios.get(entry.usuario_id))
                for entry in logs
            ],
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        data = {
            "id": self.id,
            "titulo": self.titulo,
            "descricao": self.descricao,
            "status": self.status,
            "status_label": self.status_label,
            "prioridade": self.prioridade,
            "prioridade_label": self.prioridade_label,
            "solicitante_id": self.solicitante_id,
            "responsavel_id": self.responsavel_id,
            "solicitante": self.solicitante.to_dict() if self.solicitante else None,
            "responsavel": self.responsavel.to_dict() if self.responsavel else None,
            "resolvido_em": _iso(self.resolvido_em),
            "criado_em": _iso(self.criado_em),
            "atualizado_em": _iso(self.atualizado_em),
        }
        if self.logs is not None:
            data["logs"] = [entry.to_dict() for entry in self.logs]
        return data


@dataclass
class PaginatedResultDTO:
    """
    DTO para resultados paginados.

    Attributes:
        items: Lista de itens da página atual
        total: Total de itens (sem paginação)
        pagina: Página atual
        por_pagina: Itens por página
    """

    items: List[TicketOutputDTO] = field(default_factory=list)
    total: int = 0
    pagina: int = 1
    por_pagina: int = 15

    @property
    def total_paginas(self) -> int:
        if self.por_pagina <= 0:
            return 0
        return (self.total + self.por_pagina - 1) // self.por_pagina

    @property
    def tem_proxima(self) -> bool:
        return self.pagina < self.total_paginas

    @property
    def tem_anterior(self) -> bool:
        return self.pagina > 1

    def meta(self) -> dict:
        return {
            "total": self.total,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
            "total_paginas": self.total_paginas,
            "tem_proxima": self.tem_proxima,
            "tem_anterior": self.tem_anterior,
        }

    def to_dict(self) -> dict:
        data = {"items": [item.to_dict() for item in self.items]}
        data.update(self.meta())
        return data
