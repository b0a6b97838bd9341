"""
Popula o banco com dados de exemplo.

Cria um administrador, um usuário comum e chamados com status e
prioridades alternados. Os chamados passam pelos use cases, então os
resolvidos recebem resolvido_em e entradas no histórico.

Uso:
    python manage.py popular_chamados
    python manage.py popular_chamados --quantidade 30 --senha segredo
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from chamados.config.container import get_container
from chamados.core.tickets.dtos import (
    AlterarStatusInputDTO,
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
)
from chamados.core.tickets.entities import TicketPriority, TicketStatus

from ...mappers import UsuarioMapper

USUARIOS_EXEMPLO = (
    {
        'username': 'admin',
        'email': 'admin@example.com',
        'first_name': 'Admin',
        'last_name': 'User',
        'is_staff': True,
    },
    {
        'username': 'usuario',
        'email': 'user@example.com',
        'first_name': 'Usuário',
        'last_name': 'Comum',
        'is_staff': False,
    },
)

ASSUNTOS = (
    ('Impressora do financeiro travando', 'A impressora do setor financeiro trava a cada três páginas impressas.'),
    ('Erro ao acessar o sistema de RH', 'Ao abrir o módulo de férias o sistema exibe erro 500 para todos.'),
    ('Solicitação de novo monitor', 'O monitor da estação 14 apresenta listras verticais desde segunda-feira.'),
    ('VPN desconectando', 'A conexão da VPN cai a cada dez minutos quando estou trabalhando de casa.'),
    ('Lentidão no e-mail corporativo', 'As mensagens demoram mais de cinco minutos para chegar na caixa de entrada.'),
)


class Command(BaseCommand):
    help = 'Cria usuários e chamados de exemplo'

    def add_arguments(self, parser):
        parser.add_argument('--quantidade', type=int, default=10, help='Número de chamados')
        parser.add_argument('--senha', default='password123', help='Senha dos usuários criados')

    def handle(self, *args, **options):
        admin, comum = [self._obter_usuario(dados, options['senha']) for dados in USUARIOS_EXEMPLO]
        usuarios = [admin, comum]

        container = get_container()
        statuses = list(TicketStatus)
        prioridades = list(TicketPriority)

        for i in range(options['quantidade']):
            solicitante = usuarios[i % 2]
            responsavel = usuarios[(i + 1) % 2] if i > 3 else None
            status = statuses[i % len(statuses)]
            titulo, descricao = ASSUNTOS[i % len(ASSUNTOS)]

            with transaction.atomic():
                ticket = container.criar_ticket_service().execute(
                    CriarTicketInputDTO(
                        titulo=f"{titulo} #{i + 1}",
                        descricao=descricao,
                        prioridade=prioridades[i % len(prioridades)].value,
                    ),
                    solicitante,
                )

                if responsavel is not None:
                    container.atualizar_ticket_service().execute(
                        AtualizarTicketInputDTO(
                            ticket_id=ticket.id,
                            responsavel_id=responsavel.id,
                            define_responsavel=True,
                        ),
                        admin,
                    )

                if status != TicketStatus.ABERTO:
                    container.alterar_status_ticket_service().execute(
                        AlterarStatusInputDTO(ticket_id=ticket.id, novo_status=status),
                        admin,
                    )

            self.stdout.write(f"  ✓ {ticket.titulo} [{status.value}]")

        self.stdout.write(self.style.SUCCESS(f"{options['quantidade']} chamados criados."))

    def _obter_usuario(self, dados, senha):
        dados = dict(dados)
        username = dados.pop('username')
        is_staff = dados.pop('is_staff')

        user, criado = get_user_model().objects.get_or_create(
            username=username,
            defaults={**dados, 'is_staff': is_staff, 'is_superuser': is_staff},
        )
        if criado:
            user.set_password(senha)
            user.save(update_fields=['password'])
            self.stdout.write(f"Usuário criado: {username}")
        return UsuarioMapper.to_entity(user)
