"""
Política de acesso a chamados.

Única fonte de verdade para autorização. Funções puras de
(usuário, chamado): não consultam banco nem estado global.

Regras:
- Visualizar e criar: qualquer usuário autenticado
- Atualizar, alterar status e excluir: solicitante ou administrador
- Definir responsável: somente administrador
"""

from typing import Optional

from chamados.core.shared.exceptions import PermissionDeniedError

from .entities import TicketEntity, Usuario


class AcaoTicket:
    """Nomes das ações verificadas pela política."""

    VISUALIZAR = "visualizar"
    CRIAR = "criar"
    ATUALIZAR = "atualizar"
    ALTERAR_STATUS = "alterar_status"
    EXCLUIR = "excluir"
    DEFINIR_RESPONSAVEL = "definir_responsavel"


class TicketAccessPolicy:
    """
    Decide se um usuário pode executar uma ação sobre um chamado.

    Example:
        policy = TicketAccessPolicy()
        policy.autorizar(AcaoTicket.ALTERAR_STATUS, usuario, ticket)
    """

    def pode_visualizar(self, usuario: Usuario, ticket: TicketEntity) -> bool:
        return usuario is not None

    def pode_criar(self, usuario: Usuario) -> bool:
        return usuario is not None

    def pode_atualizar(self, usuario: Usuario, ticket: TicketEntity) -> bool:
        return self._dono_ou_admin(usuario, ticket)

    def pode_alterar_status(self, usuario: Usuario, ticket: TicketEntity) -> bool:
        return self._dono_ou_admin(usuario, ticket)

    def pode_excluir(self, usuario: Usuario, ticket: TicketEntity) -> bool:
        return self._dono_ou_admin(usuario, ticket)

    def pode_definir_responsavel(
        self,
        usuario: Usuario,
        ticket: Optional[TicketEntity] = None,
    ) -> bool:
        return usuario is not None and usuario.is_admin

    def autorizar(
        self,
        acao: str,
        usuario: Usuario,
        ticket: Optional[TicketEntity] = None,
    ) -> None:
        """
        Raises:
            PermissionDeniedError: Se a ação não é permitida
        """
        verificador = getattr(self, f"pode_{acao}", None)
        if verificador is None:
            raise ValueError(f"Ação desconhecida: {acao}")

        permitido = verificador(usuario) if acao == AcaoTicket.CRIAR else verificador(usuario, ticket)
        if not permitido:
            raise PermissionDeniedError(action=acao)

    @staticmethod
    def _dono_ou_admin(usuario: Usuario, ticket: TicketEntity) -> bool:
        if usuario is None or ticket is None:
            return False
        return usuario.is_admin or ticket.pertence_a(usuario.id)
