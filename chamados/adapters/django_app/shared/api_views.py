"""
Infraestrutura comum das APIs JSON.

- Envelope {success, data/error, meta}
- Parsing de JSON do corpo da requisição
- BaseAPIView: autenticação, acesso ao container DI e mapeamento
  de exceções de domínio em status HTTP
"""

import json
import logging
from typing import Any, Dict, Optional

from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from chamados.core.tickets.entities import Usuario
from chamados.core.shared.exceptions import (
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from chamados.config.container import get_container
from chamados.adapters.django_app.tickets.mappers import UsuarioMapper

logger = logging.getLogger(__name__)

MENSAGEM_NAO_AUTENTICADO = "Não autenticado. Faça login para continuar."


class NotAuthenticated(Exception):
    def __init__(self, message: str = MENSAGEM_NAO_AUTENTICADO):
        self.message = message
        super().__init__(message)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("O corpo da requisição deve ser um objeto JSON")
    return data


def campo_texto(data: Dict, field: str) -> Optional[str]:
    """
    Campo ausente → None; presente com null → "" (falha na validação).

    Raises:
        ValidationError: Se o valor não for uma string JSON
    """
    if field not in data:
        return None
    value = data[field]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"O campo {field} deve ser um texto.", field=field)
    return value


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Autenticação obrigatória (401), exceto quando
      ``requer_autenticacao = False``
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    requer_autenticacao = True

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        try:
            self.usuario = self.get_usuario(request) if self.requer_autenticacao else None
            return super().dispatch(request, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def get_usuario(self, request: HttpRequest) -> Usuario:
        """
        Raises:
            NotAuthenticated: Se não há usuário autenticado
        """
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            raise NotAuthenticated()
        return UsuarioMapper.to_entity(user)

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """Converte exceções em respostas com o status HTTP apropriado."""
        if isinstance(e, NotAuthenticated):
            return json_response(success=False, error=e.message, status=401)

        if isinstance(e, PermissionDeniedError):
            return json_response(success=False, error=e.message, status=403)

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=e.message, status=404)

        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=e.message,
                status=422,
                meta={'code': e.code, 'errors': e.errors},
            )

        if isinstance(e, PersistenceError):
            logger.error("Erro de persistência na API: %s", e)
            return json_response(success=False, error=e.message, status=500)

        if isinstance(e, DomainException):
            return json_response(success=False, error=e.message, status=400)

        if isinstance(e, ValueError):
            return json_response(success=False, error=str(e), status=400)

        logger.exception("Erro inesperado na API: %s", e)
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )
