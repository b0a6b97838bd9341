"""
Fixtures para testes dos adapters Django.

Usuários reais do django.contrib.auth, clients autenticados e
criação de chamados direto pelo ORM.
"""

import uuid

import pytest
from django.utils import timezone

from chamados.config.container import reset_container


@pytest.fixture(autouse=True)
def reset_di_container():
    """Reset container entre testes."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username="admin",
        email="admin@example.com",
        password="password123",
        first_name="Admin",
        last_name="User",
        is_staff=True,
    )


@pytest.fixture
def solicitante_user(django_user_model):
    return django_user_model.objects.create_user(
        username="usuario",
        email="user@example.com",
        password="password123",
        first_name="Usuário",
        last_name="Comum",
    )


@pytest.fixture
def outro_user(django_user_model):
    return django_user_model.objects.create_user(
        username="outro",
        email="outro@example.com",
        password="password123",
    )


def _client_para(user):
    from django.test import Client

    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def cliente_admin(admin_user):
    return _client_para(admin_user)


@pytest.fixture
def cliente_solicitante(solicitante_user):
    return _client_para(solicitante_user)


@pytest.fixture
def cliente_outro(outro_user):
    return _client_para(outro_user)


@pytest.fixture
def ticket_model_factory(solicitante_user):
    """Factory para criar TicketModel para testes."""
    from chamados.adapters.django_app.tickets.models import TicketModel

    def create_ticket(**kwargs):
        defaults = {
            'id': str(uuid.uuid4()),
            'titulo': 'Impressora travando',
            'descricao': 'O equipamento da sala 12 desliga sozinho durante o expediente',
            'status': 'ABERTO',
            'prioridade': 'MEDIA',
            'solicitante_id': str(solicitante_user.pk),
            'criado_em': timezone.now(),
        }
        defaults.update(kwargs)
        return TicketModel.objects.create(**defaults)

    return create_ticket
