"""
URL patterns para a API de Chamados (montada em /api/tickets/).

- GET|POST /api/tickets/
- GET|PATCH|PUT|DELETE /api/tickets/<id>/
- PATCH /api/tickets/<id>/status/
"""

from django.urls import path
from . import api_views

app_name = 'tickets'

urlpatterns = [
    path('', api_views.TicketAPIListView.as_view(), name='api_list'),
    path('<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='api_detail'),
    path('<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='api_status'),
]
