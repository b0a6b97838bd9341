"""
Entidades do Domínio de Chamados.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a chamados (tickets).

Entidades:
- TicketEntity: Agregado principal do domínio
- TicketLogEntity: Entrada imutável do log de auditoria de status
- Usuario: Usuário que age sobre o chamado (solicitante, admin)
- TicketStatus: Estados possíveis de um ticket
- TicketPriority: Níveis de prioridade

Regras de Negócio Encapsuladas:
- Validação de título e descrição
- Status sempre ABERTO na criação
- Invariante de resolvido_em: preenchido se e somente se o
  status é RESOLVIDO
- Soft delete (ticket excluído permanece para auditoria)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
import uuid

from chamados.core.shared.exceptions import (
    ValidationError,
    InvalidEnumValueError,
)


def agora() -> datetime:
    """Timestamp atual em UTC."""
    return datetime.now(timezone.utc)


def _mensagem_enum(enum_cls, prefixo: str) -> str:
    nomes = [member.name for member in enum_cls]
    return f"{prefixo} deve ser {', '.join(nomes[:-1])} ou {nomes[-1]}."


def _parse_enum(enum_cls, value: object, prefixo: str, campo: str):
    """
    Converte token para membro do enum.

    Aceita o nome do membro (``"EM_ANDAMENTO"``, sem diferenciar
    maiúsculas) ou o rótulo de exibição (``"Em Andamento"``).
    Qualquer outro valor é rejeitado aqui, na borda.
    """
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str) and value.strip():
        token = value.strip()

        try:
            return enum_cls[token.upper().replace(" ", "_")]
        except KeyError:
            pass

        for member in enum_cls:
            if member.label.lower() == token.lower():
                return member

    raise InvalidEnumValueError(
        _mensagem_enum(enum_cls, prefixo),
        field=campo,
        value=value,
    )


class TicketStatus(Enum):
    """
    Estados possíveis de um chamado.

    Não há restrição de grafo: qualquer estado é alcançável a partir
    de qualquer outro (um chamado RESOLVIDO pode ser reaberto).

        ABERTO ⇄ EM_ANDAMENTO ⇄ RESOLVIDO
           ↑___________________________↓
    """

    ABERTO = "ABERTO"
    EM_ANDAMENTO = "EM_ANDAMENTO"
    RESOLVIDO = "RESOLVIDO"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_string(cls, value: object) -> "TicketStatus":
        """
        Raises:
            InvalidEnumValueError: Se o valor não é um status conhecido
        """
        return _parse_enum(cls, value, "O status", "status")

    @classmethod
    def mensagem_invalido(cls) -> str:
        return _mensagem_enum(cls, "O status")


class TicketPriority(Enum):
    """Níveis de prioridade. Alteráveis independentemente do status."""

    BAIXA = "BAIXA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"

    @property
    def label(self) -> str:
        return _PRIORIDADE_LABELS[self]

    @classmethod
    def from_string(cls, value: object) -> "TicketPriority":
        return _parse_enum(cls, value, "A prioridade", "prioridade")

    @classmethod
    def mensagem_invalido(cls) -> str:
        return _mensagem_enum(cls, "A prioridade")


_STATUS_LABELS = {
    TicketStatus.ABERTO: "Aberto",
    TicketStatus.EM_ANDAMENTO: "Em Andamento",
    TicketStatus.RESOLVIDO: "Resolvido",
}

_PRIORIDADE_LABELS = {
    TicketPriority.BAIXA: "Baixa",
    TicketPriority.MEDIA: "Média",
    TicketPriority.ALTA: "Alta",
}


@dataclass(frozen=True)
class Usuario:
    """
    Usuário que age sobre um chamado.

    Sempre passado explicitamente para os use cases; o core nunca
    consulta um "usuário atual" global.

    Attributes:
        id: Identificador do usuário
        nome: Nome para exibição
        email: Endereço para notificações
        is_admin: Se possui privilégio de administrador
    """

    id: str
    nome: str = ""
    email: str = ""
    is_admin: bool = False


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Chamado.

    Invariantes:
    - Título entre 5 e 120 caracteres (após trim)
    - Descrição com pelo menos 20 caracteres (após trim)
    - Criado sempre com status ABERTO e resolvido_em nulo
    - resolvido_em preenchido se e somente se status == RESOLVIDO
    - solicitante_id imutável após a criação

    Attributes:
        id: Identificador único (UUID)
        titulo: Título do chamado
        descricao: Descrição detalhada do problema
        status: Estado atual
        prioridade: Nível de prioridade
        solicitante_id: ID do usuário que abriu o chamado
        responsavel_id: ID do usuário responsável (opcional)
        resolvido_em: Momento da última resolução
        criado_em: Data/hora de criação
        atualizado_em: Data/hora da última atualização
        excluido_em: Marcador de soft delete

    Example:
        ticket = TicketEntity.criar(
            titulo="Login quebrado para todos",
            descricao="Nenhum usuário consegue entrar desde a manhã de hoje",
            solicitante_id="42",
            prioridade=TicketPriority.ALTA,
        )
        anterior = ticket.alterar_status(TicketStatus.RESOLVIDO)
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    titulo: str = ""
    descricao: str = ""

    status: TicketStatus = field(default=TicketStatus.ABERTO)
    prioridade: TicketPriority = field(default=TicketPriority.MEDIA)

    solicitante_id: str = ""
    responsavel_id: Optional[str] = None

    resolvido_em: Optional[datetime] = None
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)
    excluido_em: Optional[datetime] = None

    TITULO_MIN_LENGTH = 5
    TITULO_MAX_LENGTH = 120
    DESCRICAO_MIN_LENGTH = 20

    @classmethod
    def criar(
        cls,
        titulo: str,
        descricao: str,
        solicitante_id: str,
        prioridade: TicketPriority,
    ) -> "TicketEntity":
        """
        Factory method para criar chamado com validações.

        Status, resolvido_em e responsável são sempre forçados
        (ABERTO, None, None), independente do que o chamador enviar.

        Raises:
            ValidationError: Com erros por campo, se dados inválidos
        """
        erros = cls.validar_campos(titulo=titulo, descricao=descricao)
        if not solicitante_id:
            erros["solicitante_id"] = ["O solicitante é obrigatório."]
        if not isinstance(prioridade, TicketPriority):
            erros["prioridade"] = [TicketPriority.mensagem_invalido()]
        if erros:
            raise ValidationError("Os dados informados são inválidos.", errors=erros)

        momento = agora()
        return cls(
            titulo=titulo.strip(),
            descricao=descricao.strip(),
            solicitante_id=str(solicitante_id),
            prioridade=prioridade,
            status=TicketStatus.ABERTO,
            responsavel_id=None,
            resolvido_em=None,
            criado_em=momento,
            atualizado_em=momento,
        )

    @classmethod
    def validar_campos(
        cls,
        titulo: Optional[str] = None,
        descricao: Optional[str] = None,
    ) -> Dict[str, List[str]]:
        """
        Valida os campos de texto informados.

        Campos passados como None não são validados (atualização parcial).
        Na criação, use string vazia para marcar campo ausente.

        Returns:
            Mapa campo -> mensagens (vazio se tudo válido)
        """
        erros: Dict[str, List[str]] = {}

        if titulo is not None:
            mensagens = cls._erros_titulo(titulo)
            if mensagens:
                erros["titulo"] = mensagens

        if descricao is not None:
            mensagens = cls._erros_descricao(descricao)
            if mensagens:
                erros["descricao"] = mensagens

        return erros

    @classmethod
    def _erros_titulo(cls, titulo: object) -> List[str]:
        if not isinstance(titulo, str) or not titulo.strip():
            return ["O título é obrigatório."]

        tamanho = len(titulo.strip())
        if tamanho < cls.TITULO_MIN_LENGTH:
            return [f"O título deve ter no mínimo {cls.TITULO_MIN_LENGTH} caracteres."]
        if tamanho > cls.TITULO_MAX_LENGTH:
            return [f"O título deve ter no máximo {cls.TITULO_MAX_LENGTH} caracteres."]
        return []

    @classmethod
    def _erros_descricao(cls, descricao: object) -> List[str]:
        if not isinstance(descricao, str) or not descricao.strip():
            return ["A descrição é obrigatória."]

        if len(descricao.strip()) < cls.DESCRICAO_MIN_LENGTH:
            return [f"A descrição deve ter no mínimo {cls.DESCRICAO_MIN_LENGTH} caracteres."]
        return []

    def alterar_status(
        self,
        novo_status: TicketStatus,
        momento: Optional[datetime] = None,
    ) -> TicketStatus:
        """
        Aplica uma transição de status.

        Regra de resolvido_em:
        - Entrando em RESOLVIDO: recebe o momento atual
        - Saindo de RESOLVIDO: volta a None
        - Demais casos: inalterado

        Transição para o mesmo status é permitida e tratada como
        qualquer outra (o chamador registra o log normalmente).

        Args:
            novo_status: Status desejado
            momento: Timestamp da transição (default: agora)

        Returns:
            Status anterior à transição

        Raises:
            InvalidEnumValueError: Se novo_status não é um TicketStatus
        """
        if not isinstance(novo_status, TicketStatus):
            raise InvalidEnumValueError(
                TicketStatus.mensagem_invalido(),
                field="status",
                value=novo_status,
            )

        momento = momento or agora()
        status_anterior = self.status

        if novo_status == TicketStatus.RESOLVIDO:
            self.resolvido_em = momento
        elif status_anterior == TicketStatus.RESOLVIDO:
            self.resolvido_em = None

        self.status = novo_status
        self.atualizado_em = momento
        return status_anterior

    def atualizar(
        self,
        titulo: Optional[str] = None,
        descricao: Optional[str] = None,
        prioridade: Optional[TicketPriority] = None,
    ) -> List[str]:
        """
        Atualização parcial dos campos editáveis.

        Assume que os valores já foram validados (ver validar_campos).

        Returns:
            Nomes dos campos efetivamente alterados
        """
        alterados = []

        if titulo is not None and titulo.strip() != self.titulo:
            self.titulo = titulo.strip()
            alterados.append("titulo")

        if descricao is not None and descricao.strip() != self.descricao:
            self.descricao = descricao.strip()
            alterados.append("descricao")

        if prioridade is not None and prioridade != self.prioridade:
            self.prioridade = prioridade
            alterados.append("prioridade")

        if alterados:
            self._atualizar_timestamp()
        return alterados

    def definir_responsavel(self, responsavel_id: Optional[str]) -> bool:
        """
        Define (ou remove, com None) o responsável.

        A verificação de privilégio de administrador é feita pela
        política de acesso antes desta chamada.

        Returns:
            True se o responsável mudou
        """
        novo = str(responsavel_id) if responsavel_id is not None else None
        if novo == self.responsavel_id:
            return False
        self.responsavel_id = novo
        self._atualizar_timestamp()
        return True

    def excluir(self, momento: Optional[datetime] = None) -> None:
        """Soft delete: o chamado some das consultas mas o log permanece."""
        self.excluido_em = momento or agora()
        self._atualizar_timestamp()

    def pertence_a(self, usuario_id: str) -> bool:
        return str(usuario_id) == self.solicitante_id

    @property
    def esta_resolvido(self) -> bool:
        return self.status == TicketStatus.RESOLVIDO

    @property
    def esta_excluido(self) -> bool:
        return self.excluido_em is not None

    def _atualizar_timestamp(self) -> None:
        self.atualizado_em = agora()

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id[:8]}..., "
            f"titulo='{self.titulo[:20]}...', "
            f"status={self.status.value}, "
            f"prioridade={self.prioridade.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class TicketLogEntity:
    """
    Entrada do log de auditoria de status (append-only).

    Uma por transição. ``id`` e ``criado_em`` são atribuídos pelo
    armazenamento no momento da escrita e nunca mais alterados.

    Attributes:
        ticket_id: Chamado ao qual a entrada pertence
        de: Status imediatamente anterior à transição
        para: Status resultante
        usuario_id: Quem executou a transição
        id: Sequencial atribuído pelo armazenamento
        criado_em: Momento da escrita
    """

    ticket_id: str
    de: Optional[TicketStatus]
    para: TicketStatus
    usuario_id: str
    id: Optional[int] = None
    criado_em: Optional[datetime] = None
