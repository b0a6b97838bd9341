"""
API Views JSON de autenticação.

Endpoints:
- POST /api/login/ - Inicia sessão (email, senha)
- POST /api/register/ - Cria conta de usuário comum e inicia sessão
- POST /api/logout/ - Encerra a sessão
- GET /api/me/ - Usuário autenticado

Autenticação por sessão do django.contrib.auth. Os usuários são
sempre devolvidos no formato de Usuario (id, nome, email, is_admin).
"""

import logging
from dataclasses import asdict
from typing import Dict, List

from django.contrib.auth import authenticate, get_user_model, login, logout
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db.models import Q
from django.http import JsonResponse, HttpRequest

from chamados.core.shared.exceptions import ValidationError
from chamados.core.tickets.entities import Usuario
from chamados.adapters.django_app.shared.api_views import (
    BaseAPIView,
    NotAuthenticated,
    campo_texto,
    json_response,
)
from chamados.adapters.django_app.tickets.mappers import UsuarioMapper

logger = logging.getLogger(__name__)

MENSAGEM_CREDENCIAIS_INVALIDAS = "E-mail ou senha inválidos."
MENSAGEM_DADOS_INVALIDOS = "Os dados informados são inválidos."
TAMANHO_MINIMO_SENHA = 8


def _usuario_payload(usuario: Usuario) -> Dict:
    return asdict(usuario)


def _validar(erros: Dict[str, List[str]]) -> None:
    if erros:
        raise ValidationError(MENSAGEM_DADOS_INVALIDOS, errors=erros)


class LoginAPIView(BaseAPIView):
    """POST /api/login/"""

    requer_autenticacao = False

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "email": "string",
            "senha": "string"
        }
        """
        data = self.parse_body(request)
        email = (campo_texto(data, 'email') or '').strip()
        senha = campo_texto(data, 'senha') or ''

        erros: Dict[str, List[str]] = {}
        if not email:
            erros['email'] = ["O e-mail é obrigatório."]
        if not senha:
            erros['senha'] = ["A senha é obrigatória."]
        _validar(erros)

        user = get_user_model().objects.filter(email__iexact=email).first()
        if user is not None:
            user = authenticate(request, username=user.get_username(), password=senha)

        if user is None:
            logger.info("API: Falha de login para %s", email)
            raise NotAuthenticated(MENSAGEM_CREDENCIAIS_INVALIDAS)

        login(request, user)
        logger.info("API: Login de %s", user.pk)

        return json_response(success=True, data=_usuario_payload(UsuarioMapper.to_entity(user)))


class RegisterAPIView(BaseAPIView):
    """POST /api/register/"""

    requer_autenticacao = False

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "nome": "string",
            "email": "string",
            "senha": "string (mínimo 8 caracteres)",
            "senha_confirmacao": "string"
        }

        Contas criadas por aqui nunca são administradoras.
        """
        data = self.parse_body(request)
        nome = (campo_texto(data, 'nome') or '').strip()
        email = (campo_texto(data, 'email') or '').strip()
        senha = campo_texto(data, 'senha') or ''
        confirmacao = campo_texto(data, 'senha_confirmacao') or ''

        User = get_user_model()

        erros: Dict[str, List[str]] = {}
        if not nome:
            erros['nome'] = ["O nome é obrigatório."]
        elif len(nome) > 150:
            erros['nome'] = ["O nome deve ter no máximo 150 caracteres."]

        if not email:
            erros['email'] = ["O e-mail é obrigatório."]
        else:
            try:
                validate_email(email)
            except DjangoValidationError:
                erros['email'] = ["Informe um e-mail válido."]
            else:
                if len(email) > 150:
                    erros['email'] = ["O e-mail deve ter no máximo 150 caracteres."]
                elif User.objects.filter(Q(email__iexact=email) | Q(username__iexact=email)).exists():
                    erros['email'] = ["Este e-mail já está em uso."]

        if len(senha) < TAMANHO_MINIMO_SENHA:
            erros['senha'] = [f"A senha deve ter no mínimo {TAMANHO_MINIMO_SENHA} caracteres."]
        elif senha != confirmacao:
            erros['senha'] = ["A confirmação da senha não confere."]

        _validar(erros)

        user = User.objects.create_user(
            username=email.lower(),
            email=email,
            password=senha,
            first_name=nome,
        )
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        logger.info("API: Usuário registrado: %s", user.pk)

        return json_response(
            success=True,
            data=_usuario_payload(UsuarioMapper.to_entity(user)),
            status=201,
        )


class LogoutAPIView(BaseAPIView):
    """POST /api/logout/"""

    def post(self, request: HttpRequest) -> JsonResponse:
        logout(request)
        logger.info("API: Logout de %s", self.usuario.id)

        return json_response(success=True, data={'message': 'Sessão encerrada com sucesso.'})


class MeAPIView(BaseAPIView):
    """GET /api/me/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        return json_response(success=True, data=_usuario_payload(self.usuario))
