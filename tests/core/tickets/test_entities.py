"""
Testes Unitários para Entidades do Domínio de Chamados.

Testa as regras encapsuladas nas entidades, sem banco e sem Django:
- Conversão de tokens de status/prioridade (borda de parsing)
- Factory TicketEntity.criar e validação de campos
- Regra de resolvido_em nas transições
- Atualização parcial, responsável e soft delete
"""

from datetime import datetime, timezone

import pytest

from chamados.core.tickets.entities import (
    TicketEntity,
    TicketLogEntity,
    TicketPriority,
    TicketStatus,
)
from chamados.core.shared.exceptions import InvalidEnumValueError, ValidationError


MOMENTO = datetime(2024, 5, 10, 15, 30, tzinfo=timezone.utc)


# =============================================================================
# Enums
# =============================================================================

class TestTicketStatus:
    """Testes para TicketStatus."""

    @pytest.mark.parametrize("token,esperado", [
        ("ABERTO", TicketStatus.ABERTO),
        ("em_andamento", TicketStatus.EM_ANDAMENTO),
        ("Em Andamento", TicketStatus.EM_ANDAMENTO),
        ("  resolvido ", TicketStatus.RESOLVIDO),
        (TicketStatus.RESOLVIDO, TicketStatus.RESOLVIDO),
    ])
    def test_from_string_aceita_nome_e_rotulo(self, token, esperado):
        assert TicketStatus.from_string(token) is esperado

    @pytest.mark.parametrize("token", ["FECHADO", "", "   ", None, 3])
    def test_from_string_rejeita_desconhecido(self, token):
        with pytest.raises(InvalidEnumValueError) as exc:
            TicketStatus.from_string(token)

        assert exc.value.field == "status"
        assert exc.value.code == "INVALID_ENUM_VALUE"
        assert exc.value.message == "O status deve ser ABERTO, EM_ANDAMENTO ou RESOLVIDO."

    def test_labels(self):
        assert TicketStatus.ABERTO.label == "Aberto"
        assert TicketStatus.EM_ANDAMENTO.label == "Em Andamento"
        assert TicketStatus.RESOLVIDO.label == "Resolvido"


class TestTicketPriority:
    """Testes para TicketPriority."""

    def test_from_string_aceita_rotulo_acentuado(self):
        assert TicketPriority.from_string("Média") is TicketPriority.MEDIA
        assert TicketPriority.from_string("alta") is TicketPriority.ALTA

    def test_from_string_rejeita_desconhecido(self):
        with pytest.raises(InvalidEnumValueError) as exc:
            TicketPriority.from_string("CRITICA")

        assert exc.value.field == "prioridade"
        assert exc.value.errors == {
            "prioridade": ["A prioridade deve ser BAIXA, MEDIA ou ALTA."]
        }


# =============================================================================
# Criação
# =============================================================================

class TestTicketEntityCriar:
    """Testes para o factory method TicketEntity.criar."""

    def test_criar_ticket_valido(self):
        """Deve nascer ABERTO, sem responsável e sem resolvido_em."""
        ticket = TicketEntity.criar(
            titulo="  Login quebrado  ",
            descricao="Nenhum usuário consegue entrar desde a manhã de hoje",
            solicitante_id=42,
            prioridade=TicketPriority.ALTA,
        )

        assert ticket.id
        assert ticket.titulo == "Login quebrado"
        assert ticket.status == TicketStatus.ABERTO
        assert ticket.resolvido_em is None
        assert ticket.responsavel_id is None
        assert ticket.solicitante_id == "42"
        assert ticket.prioridade == TicketPriority.ALTA
        assert ticket.criado_em == ticket.atualizado_em

    def test_criar_reune_todos_os_erros(self):
        """Deve reportar todos os campos inválidos de uma vez."""
        with pytest.raises(ValidationError) as exc:
            TicketEntity.criar(
                titulo="abc",
                descricao="curta",
                solicitante_id="",
                prioridade="ALTA",
            )

        erros = exc.value.errors
        assert erros["titulo"] == ["O título deve ter no mínimo 5 caracteres."]
        assert erros["descricao"] == ["A descrição deve ter no mínimo 20 caracteres."]
        assert erros["solicitante_id"] == ["O solicitante é obrigatório."]
        assert "prioridade" in erros

    def test_titulo_limites(self):
        assert TicketEntity.validar_campos(titulo="a" * 5) == {}
        assert TicketEntity.validar_campos(titulo="a" * 120) == {}
        assert TicketEntity.validar_campos(titulo="a" * 121) == {
            "titulo": ["O título deve ter no máximo 120 caracteres."]
        }

    def test_tamanho_considera_trim(self):
        erros = TicketEntity.validar_campos(titulo="   abcd   ", descricao=" " * 30)

        assert erros["titulo"] == ["O título deve ter no mínimo 5 caracteres."]
        assert erros["descricao"] == ["A descrição é obrigatória."]

    def test_campos_none_nao_sao_validados(self):
        assert TicketEntity.validar_campos() == {}


# =============================================================================
# Transições
# =============================================================================

class TestTicketEntityAlterarStatus:
    """Testes para a regra de resolvido_em nas transições."""

    @pytest.fixture
    def ticket(self):
        return TicketEntity.criar(
            titulo="VPN desconectando",
            descricao="A VPN cai a cada dez minutos quando trabalho de casa",
            solicitante_id="2",
            prioridade=TicketPriority.BAIXA,
        )

    def test_entrar_em_resolvido_preenche_resolvido_em(self, ticket):
        anterior = ticket.alterar_status(TicketStatus.RESOLVIDO, momento=MOMENTO)

        assert anterior == TicketStatus.ABERTO
        assert ticket.status == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em == MOMENTO
        assert ticket.esta_resolvido

    def test_sair_de_resolvido_limpa_resolvido_em(self, ticket):
        ticket.alterar_status(TicketStatus.RESOLVIDO, momento=MOMENTO)

        anterior = ticket.alterar_status(TicketStatus.EM_ANDAMENTO)

        assert anterior == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em is None

    def test_transicao_sem_resolvido_nao_mexe_em_resolvido_em(self, ticket):
        ticket.alterar_status(TicketStatus.EM_ANDAMENTO)
        ticket.alterar_status(TicketStatus.ABERTO)

        assert ticket.resolvido_em is None

    def test_resolver_novamente_atualiza_momento(self, ticket):
        ticket.alterar_status(TicketStatus.RESOLVIDO, momento=MOMENTO)
        depois = datetime(2024, 6, 1, tzinfo=timezone.utc)

        anterior = ticket.alterar_status(TicketStatus.RESOLVIDO, momento=depois)

        assert anterior == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em == depois

    def test_mesmo_status_e_permitido(self, ticket):
        anterior = ticket.alterar_status(TicketStatus.ABERTO)

        assert anterior == TicketStatus.ABERTO
        assert ticket.status == TicketStatus.ABERTO

    def test_valor_que_nao_e_enum_e_rejeitado(self, ticket):
        with pytest.raises(InvalidEnumValueError):
            ticket.alterar_status("RESOLVIDO")

        assert ticket.status == TicketStatus.ABERTO
        assert ticket.resolvido_em is None

    @pytest.mark.parametrize("sequencia", [
        [TicketStatus.RESOLVIDO, TicketStatus.ABERTO, TicketStatus.RESOLVIDO],
        [TicketStatus.EM_ANDAMENTO, TicketStatus.RESOLVIDO, TicketStatus.EM_ANDAMENTO],
        [TicketStatus.RESOLVIDO, TicketStatus.RESOLVIDO, TicketStatus.ABERTO],
    ])
    def test_resolvido_em_acompanha_status(self, ticket, sequencia):
        for status in sequencia:
            ticket.alterar_status(status)
            assert (ticket.resolvido_em is not None) == (ticket.status == TicketStatus.RESOLVIDO)


# =============================================================================
# Atualização, responsável e exclusão
# =============================================================================

class TestTicketEntityAtualizar:
    """Testes para atualização parcial."""

    @pytest.fixture
    def ticket(self):
        return TicketEntity.criar(
            titulo="Monitor com listras",
            descricao="O monitor da estação 14 apresenta listras verticais",
            solicitante_id="2",
            prioridade=TicketPriority.MEDIA,
        )

    def test_atualizar_retorna_campos_alterados(self, ticket):
        alterados = ticket.atualizar(titulo="Monitor com defeito", prioridade=TicketPriority.ALTA)

        assert alterados == ["titulo", "prioridade"]
        assert ticket.titulo == "Monitor com defeito"
        assert ticket.prioridade == TicketPriority.ALTA

    def test_atualizar_mesmos_valores_nao_altera(self, ticket):
        antes = ticket.atualizado_em

        assert ticket.atualizar(titulo=ticket.titulo, prioridade=ticket.prioridade) == []
        assert ticket.atualizado_em == antes

    def test_atualizar_nao_toca_status(self, ticket):
        ticket.alterar_status(TicketStatus.RESOLVIDO, momento=MOMENTO)

        ticket.atualizar(descricao="Agora o monitor nem liga mais ao apertar o botão")

        assert ticket.status == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em == MOMENTO

    def test_definir_e_remover_responsavel(self, ticket):
        assert ticket.definir_responsavel(1) is True
        assert ticket.responsavel_id == "1"
        assert ticket.definir_responsavel("1") is False

        assert ticket.definir_responsavel(None) is True
        assert ticket.responsavel_id is None

    def test_excluir_marca_soft_delete(self, ticket):
        ticket.excluir(momento=MOMENTO)

        assert ticket.esta_excluido
        assert ticket.excluido_em == MOMENTO

    def test_pertence_a(self, ticket):
        assert ticket.pertence_a(2)
        assert not ticket.pertence_a("3")

    def test_igualdade_por_id(self, ticket):
        copia = TicketEntity(id=ticket.id, titulo="outro")

        assert copia == ticket
        assert len({copia, ticket}) == 1


class TestTicketLogEntity:

    def test_entrada_e_imutavel(self):
        entrada = TicketLogEntity(
            ticket_id="t1",
            de=TicketStatus.ABERTO,
            para=TicketStatus.RESOLVIDO,
            usuario_id="1",
        )

        with pytest.raises(AttributeError):
            entrada.para = TicketStatus.ABERTO
