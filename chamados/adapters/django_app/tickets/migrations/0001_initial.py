"""
Migration inicial para o domínio de Chamados.

Cria as tabelas:
- tickets: Tabela principal de chamados
- ticket_logs: Log de auditoria de status
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('ABERTO', 'Aberto'),
    ('EM_ANDAMENTO', 'Em Andamento'),
    ('RESOLVIDO', 'Resolvido'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do chamado'
                )),
                ('titulo', models.CharField(
                    max_length=120,
                    help_text='Título do chamado'
                )),
                ('descricao', models.TextField(
                    help_text='Descrição detalhada do problema'
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=STATUS_CHOICES,
                    default='ABERTO',
                    db_index=True,
                )),
                ('prioridade', models.CharField(
                    max_length=10,
                    choices=[
                        ('BAIXA', 'Baixa'),
                        ('MEDIA', 'Média'),
                        ('ALTA', 'Alta'),
                    ],
                    default='MEDIA',
                    db_index=True,
                )),
                ('solicitante_id', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='ID do usuário que abriu o chamado'
                )),
                ('responsavel_id', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='ID do usuário responsável'
                )),
                ('resolvido_em', models.DateTimeField(
                    null=True,
                    blank=True,
                    help_text='Preenchido somente enquanto o chamado está resolvido'
                )),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                )),
                ('atualizado_em', models.DateTimeField(
                    auto_now=True,
                )),
                ('excluido_em', models.DateTimeField(
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='Soft delete'
                )),
            ],
            options={
                'db_table': 'tickets',
                'verbose_name': 'Chamado',
                'verbose_name_plural': 'Chamados',
                'ordering': ['-criado_em'],
                'indexes': [
                    models.Index(
                        fields=['status', 'criado_em'],
                        name='idx_ticket_status_criado'
                    ),
                    models.Index(
                        fields=['solicitante_id', 'criado_em'],
                        name='idx_ticket_solicitante_data'
                    ),
                ],
            },
        ),

        # =================================================================
        # Tabela: ticket_logs
        # =================================================================
        migrations.CreateModel(
            name='TicketLogModel',
            fields=[
                ('id', models.BigAutoField(
                    primary_key=True,
                    serialize=False
                )),
                ('de', models.CharField(
                    max_length=20,
                    choices=STATUS_CHOICES,
                    null=True,
                    blank=True,
                )),
                ('para', models.CharField(
                    max_length=20,
                    choices=STATUS_CHOICES,
                )),
                ('usuario_id', models.CharField(
                    max_length=100,
                    db_index=True,
                )),
                ('criado_em', models.DateTimeField(
                    auto_now_add=True,
                    db_index=True,
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='logs',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_logs',
                'verbose_name': 'Log de Chamado',
                'verbose_name_plural': 'Logs de Chamados',
                'ordering': ['criado_em', 'id'],
                'indexes': [
                    models.Index(
                        fields=['ticket', 'criado_em'],
                        name='idx_log_ticket_data'
                    ),
                ],
            },
        ),
    ]
