"""
API Views JSON para o domínio de Chamados.

Endpoints:
- GET /api/tickets/ - Listar chamados (status, prioridade, busca, page, per_page)
- POST /api/tickets/ - Criar chamado
- GET /api/tickets/<id>/ - Obter chamado com histórico
- PATCH|PUT /api/tickets/<id>/ - Atualizar chamado (parcial)
- DELETE /api/tickets/<id>/ - Excluir chamado (soft delete)
- PATCH /api/tickets/<id>/status/ - Alterar status

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Autenticação:
- Session (django.contrib.auth); o usuário da requisição é convertido
  em Usuario e passado explicitamente a cada use case
"""

import logging
from typing import Optional

from django.http import JsonResponse, HttpRequest

from chamados.core.tickets.dtos import (
    AlterarStatusInputDTO,
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ListarTicketsQueryDTO,
)
from chamados.core.tickets.entities import TicketPriority, TicketStatus
from chamados.core.shared.exceptions import ValidationError
from chamados.adapters.django_app.shared.api_views import (
    BaseAPIView,
    campo_texto,
    json_response,
)

logger = logging.getLogger(__name__)


def _parse_int(value: Optional[str], field: str, default: int) -> int:
    if value in (None, ''):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"O campo {field} deve ser um número inteiro.", field=field)


# =============================================================================
# Ticket API Views
# =============================================================================

class TicketAPIListView(BaseAPIView):
    """
    GET /api/tickets/ - Lista chamados
    POST /api/tickets/ - Cria chamado
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - status: ABERTO|EM_ANDAMENTO|RESOLVIDO
        - prioridade: BAIXA|MEDIA|ALTA
        - busca: Texto no título ou na descrição
        - page: Página (default: 1)
        - per_page: Itens por página (default: TICKETS_POR_PAGINA, máximo 100)
        """
        listar_service = self.get_service('listar_tickets_service')

        status = request.GET.get('status') or None
        prioridade = request.GET.get('prioridade') or None

        query = ListarTicketsQueryDTO(
            status=TicketStatus.from_string(status) if status else None,
            prioridade=TicketPriority.from_string(prioridade) if prioridade else None,
            busca=request.GET.get('busca') or None,
            pagina=_parse_int(request.GET.get('page'), 'page', 1),
            por_pagina=_parse_int(
                request.GET.get('per_page'), 'per_page', listar_service.por_pagina_padrao
            ),
        )

        resultado = listar_service.execute(query, self.usuario)

        return json_response(
            success=True,
            data=[t.to_dict() for t in resultado.items],
            meta=resultado.meta(),
        )

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "titulo": "string (5 a 120 caracteres)",
            "descricao": "string (mínimo 20 caracteres)",
            "prioridade": "BAIXA|MEDIA|ALTA"
        }
        """
        data = self.parse_body(request)

        criar_service = self.get_service('criar_ticket_service')

        input_dto = CriarTicketInputDTO(
            titulo=campo_texto(data, 'titulo') or '',
            descricao=campo_texto(data, 'descricao') or '',
            prioridade=campo_texto(data, 'prioridade'),
        )

        output = criar_service.execute(input_dto, self.usuario)

        logger.info("API: Chamado criado: %s", output.id)

        return json_response(success=True, data=output.to_dict(), status=201)


class TicketAPIDetailView(BaseAPIView):
    """
    GET /api/tickets/<id>/ - Obter chamado
    PATCH|PUT /api/tickets/<id>/ - Atualizar chamado
    DELETE /api/tickets/<id>/ - Excluir chamado
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        obter_service = self.get_service('obter_ticket_service')
        ticket = obter_service.execute(pk, self.usuario)

        return json_response(success=True, data=ticket.to_dict())

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON (todos opcionais):
        {
            "titulo": "string",
            "descricao": "string",
            "prioridade": "BAIXA|MEDIA|ALTA",
            "responsavel_id": "id de usuário ou null (somente admin)"
        }

        Status não é alterado aqui; use /status/.
        """
        data = self.parse_body(request)

        atualizar_service = self.get_service('atualizar_ticket_service')

        define_responsavel = 'responsavel_id' in data
        responsavel_id = data.get('responsavel_id')

        input_dto = AtualizarTicketInputDTO(
            ticket_id=pk,
            titulo=campo_texto(data, 'titulo'),
            descricao=campo_texto(data, 'descricao'),
            prioridade=campo_texto(data, 'prioridade'),
            responsavel_id=str(responsavel_id) if responsavel_id is not None else None,
            define_responsavel=define_responsavel,
        )

        output = atualizar_service.execute(input_dto, self.usuario)

        return json_response(success=True, data=output.to_dict())

    put = patch

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        excluir_service = self.get_service('excluir_ticket_service')
        excluir_service.execute(pk, self.usuario)

        logger.info("API: Chamado %s excluído", pk)

        return json_response(
            success=True,
            data={'message': 'Chamado excluído com sucesso.'},
        )


class TicketAPIStatusView(BaseAPIView):
    """
    PATCH /api/tickets/<id>/status/

    Altera apenas o status e registra a entrada no histórico.
    """

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "status": "ABERTO|EM_ANDAMENTO|RESOLVIDO"
        }
        """
        data = self.parse_body(request)

        token = data.get('status')
        if token is None or (isinstance(token, str) and not token.strip()):
            raise ValidationError("O status é obrigatório.", field='status')

        novo_status = TicketStatus.from_string(token)

        alterar_service = self.get_service('alterar_status_ticket_service')

        output = alterar_service.execute(
            AlterarStatusInputDTO(ticket_id=pk, novo_status=novo_status),
            self.usuario,
        )

        logger.info("API: Chamado %s -> %s", pk, novo_status.value)

        return json_response(success=True, data=output.to_dict())
