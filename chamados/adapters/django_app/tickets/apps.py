"""
Configuração do Django App para Chamados.
"""

from django.apps import AppConfig


class TicketsConfig(AppConfig):
    """Configuração do app Tickets."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'chamados.adapters.django_app.tickets'
    label = 'tickets'
    verbose_name = 'Gestão de Chamados'

    def ready(self):
        """
        Registra os handlers Celery do domínio.

        O import garante que as tasks existam no registry do app
        Celery mesmo quando o worker só carrega o Django.
        """
        from chamados.adapters.django_app.events import handlers  # noqa: F401
