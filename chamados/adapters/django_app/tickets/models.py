"""
Django Models para o domínio de Chamados.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em chamados/core/tickets/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- TicketModel: Tabela principal de chamados
- TicketLogModel: Log de auditoria de status (append-only)
"""

from django.db import models
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Choices para status de chamado (espelha TicketStatus do Core)."""
    ABERTO = 'ABERTO', 'Aberto'
    EM_ANDAMENTO = 'EM_ANDAMENTO', 'Em Andamento'
    RESOLVIDO = 'RESOLVIDO', 'Resolvido'


class TicketPriorityChoices(models.TextChoices):
    """Choices para prioridade de chamado (espelha TicketPriority do Core)."""
    BAIXA = 'BAIXA', 'Baixa'
    MEDIA = 'MEDIA', 'Média'
    ALTA = 'ALTA', 'Alta'


class TicketQuerySet(models.QuerySet):
    def ativos(self):
        """Exclui chamados com soft delete."""
        return self.filter(excluido_em__isnull=True)


class TicketModel(models.Model):
    """
    Model Django para persistência de Chamados.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        titulo: Título do chamado
        descricao: Descrição detalhada
        status: Estado atual (choices)
        prioridade: Nível de prioridade (choices)
        solicitante_id: ID do usuário que abriu o chamado
        responsavel_id: ID do usuário responsável
        resolvido_em: Momento da última resolução
        criado_em: Timestamp de criação
        atualizado_em: Timestamp de última atualização
        excluido_em: Marcador de soft delete
    """

    # Primary Key - UUID gerado pela Entity
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do chamado"
    )

    titulo = models.CharField(
        max_length=120,
        help_text="Título do chamado"
    )

    descricao = models.TextField(
        help_text="Descrição detalhada do problema"
    )

    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.ABERTO,
        db_index=True,
    )

    prioridade = models.CharField(
        max_length=10,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.MEDIA,
        db_index=True,
    )

    # IDs de django.contrib.auth.User como string
    solicitante_id = models.CharField(
        max_length=100,
        db_index=True,
        help_text="ID do usuário que abriu o chamado"
    )

    responsavel_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID do usuário responsável"
    )

    resolvido_em = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Preenchido somente enquanto o chamado está resolvido"
    )

    criado_em = models.DateTimeField(
        default=timezone.now,
        db_index=True,
    )

    atualizado_em = models.DateTimeField(auto_now=True)

    excluido_em = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Soft delete"
    )

    objects = TicketQuerySet.as_manager()

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Chamado'
        verbose_name_plural = 'Chamados'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='idx_ticket_status_criado'),
            models.Index(fields=['solicitante_id', 'criado_em'], name='idx_ticket_solicitante_data'),
        ]

    def __str__(self):
        return f"[{self.id[:8]}] {self.titulo}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.status}>"


class TicketLogModel(models.Model):
    """
    Log de auditoria de transições de status.

    Uma linha por transição; nunca alterada nem removida pela
    aplicação. Ordenada por (criado_em, id) reproduz todo o histórico.

    Fields:
        id: Auto-incrementing PK
        ticket: Chamado relacionado
        de: Status anterior (nulo em registros legados)
        para: Status resultante
        usuario_id: Quem executou a transição
        criado_em: Timestamp da gravação
    """

    id = models.BigAutoField(primary_key=True)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.PROTECT,
        related_name='logs',
    )

    de = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        null=True,
        blank=True,
    )

    para = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
    )

    usuario_id = models.CharField(
        max_length=100,
        db_index=True,
    )

    criado_em = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
    )

    class Meta:
        db_table = 'ticket_logs'
        verbose_name = 'Log de Chamado'
        verbose_name_plural = 'Logs de Chamados'
        ordering = ['criado_em', 'id']
        indexes = [
            models.Index(fields=['ticket', 'criado_em'], name='idx_log_ticket_data'),
        ]

    def __str__(self):
        return f"{self.ticket_id[:8]}: {self.de} -> {self.para} @ {self.criado_em}"
