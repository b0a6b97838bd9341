"""
URL Configuration para o sistema de Chamados.

Estrutura:
- /api/login/, /api/register/, /api/logout/, /api/me/ - Autenticação
- /api/tickets/ - API JSON de Chamados
- /health/ - Health check
"""

from django.http import JsonResponse
from django.urls import path, include


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('api/', include('chamados.adapters.django_app.accounts.urls')),
    path('api/tickets/', include('chamados.adapters.django_app.tickets.urls')),
    path('health/', health, name='health'),
]
