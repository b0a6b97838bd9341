"""
Testes Unitários para Use Cases do Domínio de Chamados.

Estratégia de Teste:
- Repositórios em memória (fixtures em tests/conftest.py)
- InMemoryUnitOfWork restaura os repositórios no rollback, o que
  permite injetar falhas entre a gravação do status e a do log
- Eventos verificados no InMemoryEventPublisher

Coverage:
- CriarTicketService
- AtualizarTicketService
- AlterarStatusTicketService
- ListarTicketsService
- ObterTicketService
- ExcluirTicketService
"""

from unittest.mock import Mock, patch

import pytest

from chamados.core.tickets.dtos import (
    AlterarStatusInputDTO,
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ListarTicketsQueryDTO,
)
from chamados.core.tickets.entities import TicketPriority, TicketStatus
from chamados.core.tickets.events import (
    TicketAtualizadoEvent,
    TicketCriadoEvent,
    TicketExcluidoEvent,
    TicketResolvidoEvent,
    TicketStatusAlteradoEvent,
)
from chamados.core.tickets.use_cases import AlterarStatusTicketService
from chamados.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from chamados.core.shared.exceptions import (
    EntityNotFoundError,
    InvalidEnumValueError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)


def _transicionar(service, ticket_id, status, usuario):
    return service.execute(AlterarStatusInputDTO(ticket_id=ticket_id, novo_status=status), usuario)


# =============================================================================
# Criar
# =============================================================================

class TestCriarTicketService:
    """Testes para CriarTicketService."""

    def test_criar_ticket_sucesso(self, criar_service, ticket_repo, log_repo, solicitante, event_publisher):
        """Deve criar chamado ABERTO com o usuário como solicitante."""
        output = criar_service.execute(
            CriarTicketInputDTO(
                titulo="Erro ao acessar o RH",
                descricao="Ao abrir o módulo de férias o sistema exibe erro 500",
                prioridade="ALTA",
            ),
            solicitante,
        )

        assert output.status == "ABERTO"
        assert output.prioridade == "ALTA"
        assert output.resolvido_em is None
        assert output.responsavel is None
        assert output.solicitante.id == solicitante.id
        assert output.solicitante.nome == "Usuário Comum"

        salvo = ticket_repo.get_by_id(output.id)
        assert salvo.titulo == "Erro ao acessar o RH"
        assert salvo.solicitante_id == solicitante.id

        assert log_repo.count() == 0
        eventos = event_publisher.get_events_by_type("TicketCriadoEvent")
        assert len(eventos) == 1
        assert isinstance(eventos[0], TicketCriadoEvent)
        assert eventos[0].aggregate_id == output.id

    def test_criar_sem_prioridade(self, criar_service, ticket_repo, solicitante):
        with pytest.raises(ValidationError) as exc:
            criar_service.execute(
                CriarTicketInputDTO(
                    titulo="Título válido",
                    descricao="Descrição com tamanho suficiente aqui",
                ),
                solicitante,
            )

        assert exc.value.errors == {"prioridade": ["A prioridade é obrigatória."]}
        assert ticket_repo.count() == 0

    def test_criar_reune_erros_de_todos_os_campos(self, criar_service, ticket_repo, solicitante):
        with pytest.raises(ValidationError) as exc:
            criar_service.execute(
                CriarTicketInputDTO(titulo="", descricao="curta", prioridade="URGENTE"),
                solicitante,
            )

        erros = exc.value.errors
        assert erros["titulo"] == ["O título é obrigatório."]
        assert erros["descricao"] == ["A descrição deve ter no mínimo 20 caracteres."]
        assert erros["prioridade"] == ["A prioridade deve ser BAIXA, MEDIA ou ALTA."]
        assert ticket_repo.count() == 0


# =============================================================================
# Alterar status
# =============================================================================

class TestAlterarStatusTicketService:
    """Testes para o motor de transições."""

    def test_resolver_preenche_resolvido_em_e_grava_log(
        self, alterar_status_service, ticket_aberto, ticket_repo, log_repo, admin
    ):
        output = _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)

        assert output.status == "RESOLVIDO"
        assert output.resolvido_em is not None
        assert ticket_repo.get_by_id(ticket_aberto.id).resolvido_em is not None

        logs = log_repo.list_by_ticket(ticket_aberto.id)
        assert len(logs) == 1
        assert logs[0].de == TicketStatus.ABERTO
        assert logs[0].para == TicketStatus.RESOLVIDO
        assert logs[0].usuario_id == admin.id
        assert logs[0].id is not None and logs[0].criado_em is not None

        assert [entry.para for entry in output.logs] == ["RESOLVIDO"]
        assert output.logs[0].usuario.nome == "Admin User"

    def test_solicitante_pode_alterar_proprio_chamado(
        self, alterar_status_service, ticket_aberto, solicitante
    ):
        output = _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.EM_ANDAMENTO, solicitante)

        assert output.status == "EM_ANDAMENTO"
        assert output.status_label == "Em Andamento"

    def test_outro_usuario_e_negado_e_nada_muda(
        self, alterar_status_service, ticket_aberto, ticket_repo, log_repo, outro_usuario, event_publisher
    ):
        with pytest.raises(PermissionDeniedError) as exc:
            _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, outro_usuario)

        assert exc.value.message == "Você não tem permissão para realizar esta ação."
        salvo = ticket_repo.get_by_id(ticket_aberto.id)
        assert salvo.status == TicketStatus.ABERTO
        assert salvo.resolvido_em is None
        assert log_repo.count() == 0
        assert event_publisher.published_events == []

    def test_chamado_inexistente(self, alterar_status_service, admin):
        with pytest.raises(EntityNotFoundError) as exc:
            _transicionar(alterar_status_service, "nao-existe", TicketStatus.RESOLVIDO, admin)

        assert exc.value.entity_id == "nao-existe"

    def test_status_nao_enum_e_rejeitado(self, alterar_status_service, ticket_aberto, log_repo, admin):
        with pytest.raises(InvalidEnumValueError):
            _transicionar(alterar_status_service, ticket_aberto.id, "FECHADO", admin)

        assert log_repo.count() == 0

    def test_mesmo_status_gera_log_com_de_igual_para(
        self, alterar_status_service, ticket_aberto, log_repo, admin
    ):
        output = _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.ABERTO, admin)

        logs = log_repo.list_by_ticket(ticket_aberto.id)
        assert len(logs) == 1
        assert logs[0].de == logs[0].para == TicketStatus.ABERTO
        assert output.resolvido_em is None

    def test_falha_no_log_desfaz_status(
        self, alterar_status_service, ticket_aberto, ticket_repo, log_repo, admin, event_publisher, uow
    ):
        """Falha entre a gravação do status e a do log não deixa rastro."""
        with patch.object(log_repo, "append", side_effect=PersistenceError("disco cheio")):
            with pytest.raises(PersistenceError):
                _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)

        salvo = ticket_repo.get_by_id(ticket_aberto.id)
        assert salvo.status == TicketStatus.ABERTO
        assert salvo.resolvido_em is None
        assert log_repo.count() == 0
        assert uow.rolled_back
        assert event_publisher.published_events == []

    def test_falha_ao_salvar_chamado_nao_grava_log(
        self, alterar_status_service, ticket_aberto, ticket_repo, log_repo, admin
    ):
        with patch.object(ticket_repo, "save", side_effect=PersistenceError("timeout")):
            with pytest.raises(PersistenceError):
                _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.EM_ANDAMENTO, admin)

        assert ticket_repo.get_by_id(ticket_aberto.id).status == TicketStatus.ABERTO
        assert log_repo.count() == 0

    def test_resolver_publica_evento_de_resolucao(
        self, alterar_status_service, ticket_aberto, admin, solicitante, event_publisher
    ):
        _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)

        alterados = event_publisher.get_events_by_type("TicketStatusAlteradoEvent")
        resolvidos = event_publisher.get_events_by_type("TicketResolvidoEvent")

        assert len(alterados) == 1
        assert isinstance(alterados[0], TicketStatusAlteradoEvent)
        assert (alterados[0].de, alterados[0].para) == ("ABERTO", "RESOLVIDO")

        assert len(resolvidos) == 1
        evento = resolvidos[0]
        assert isinstance(evento, TicketResolvidoEvent)
        assert evento.solicitante_id == solicitante.id
        assert evento.resolvido_por_id == admin.id
        assert evento.to_dict()["data"]["titulo"] == ticket_aberto.titulo

    def test_sem_evento_de_resolucao_fora_de_resolvido(
        self, alterar_status_service, ticket_aberto, admin, event_publisher
    ):
        _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.EM_ANDAMENTO, admin)

        assert event_publisher.get_events_by_type("TicketResolvidoEvent") == []

    def test_falha_na_publicacao_nao_afeta_transicao(
        self, ticket_repo, log_repo, usuario_repo, policy, ticket_aberto, admin
    ):
        publisher = Mock()
        publisher.publish.side_effect = RuntimeError("broker fora do ar")
        uow = InMemoryUnitOfWork(event_publisher=publisher, repositories=[ticket_repo, log_repo])
        service = AlterarStatusTicketService(ticket_repo, log_repo, usuario_repo, uow, policy)

        output = _transicionar(service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)

        assert output.status == "RESOLVIDO"
        assert publisher.publish.called
        assert log_repo.count() == 1

    def test_cenario_completo_com_reabertura(
        self, alterar_status_service, ticket_aberto, log_repo, admin
    ):
        """ABERTO → EM_ANDAMENTO → RESOLVIDO → EM_ANDAMENTO gera três logs."""
        for status in (TicketStatus.EM_ANDAMENTO, TicketStatus.RESOLVIDO):
            _transicionar(alterar_status_service, ticket_aberto.id, status, admin)

        output = _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.EM_ANDAMENTO, admin)

        assert output.status == "EM_ANDAMENTO"
        assert output.resolvido_em is None

        logs = log_repo.list_by_ticket(ticket_aberto.id)
        assert [(e.de, e.para) for e in logs] == [
            (TicketStatus.ABERTO, TicketStatus.EM_ANDAMENTO),
            (TicketStatus.EM_ANDAMENTO, TicketStatus.RESOLVIDO),
            (TicketStatus.RESOLVIDO, TicketStatus.EM_ANDAMENTO),
        ]
        assert [e["de"] for e in output.to_dict()["logs"]] == ["ABERTO", "EM_ANDAMENTO", "RESOLVIDO"]


# =============================================================================
# Atualizar
# =============================================================================

class TestAtualizarTicketService:
    """Testes para AtualizarTicketService."""

    def test_solicitante_atualiza_campos(
        self, atualizar_service, ticket_aberto, ticket_repo, solicitante, event_publisher
    ):
        output = atualizar_service.execute(
            AtualizarTicketInputDTO(
                ticket_id=ticket_aberto.id,
                titulo="Impressora não imprime",
                prioridade="BAIXA",
            ),
            solicitante,
        )

        assert output.titulo == "Impressora não imprime"
        assert output.prioridade == "BAIXA"
        assert output.descricao == ticket_aberto.descricao
        assert output.status == "ABERTO"

        evento = event_publisher.get_events_by_type("TicketAtualizadoEvent")[0]
        assert isinstance(evento, TicketAtualizadoEvent)
        assert evento.campos == ["titulo", "prioridade"]

    def test_admin_define_responsavel(self, atualizar_service, ticket_aberto, ticket_repo, admin, outro_usuario):
        output = atualizar_service.execute(
            AtualizarTicketInputDTO(
                ticket_id=ticket_aberto.id,
                responsavel_id=outro_usuario.id,
                define_responsavel=True,
            ),
            admin,
        )

        assert output.responsavel.id == outro_usuario.id
        assert output.responsavel.nome == "Outro Usuário"
        assert ticket_repo.get_by_id(ticket_aberto.id).responsavel_id == outro_usuario.id

    def test_admin_remove_responsavel(self, atualizar_service, ticket_repo, ticket_aberto, admin):
        ticket_aberto.definir_responsavel(admin.id)
        ticket_repo.save(ticket_aberto)

        output = atualizar_service.execute(
            AtualizarTicketInputDTO(ticket_id=ticket_aberto.id, responsavel_id=None, define_responsavel=True),
            admin,
        )

        assert output.responsavel_id is None

    def test_responsavel_por_nao_admin_nega_requisicao_inteira(
        self, atualizar_service, ticket_aberto, ticket_repo, solicitante, outro_usuario
    ):
        """Título válido não é aplicado quando o responsável é recusado."""
        with pytest.raises(PermissionDeniedError):
            atualizar_service.execute(
                AtualizarTicketInputDTO(
                    ticket_id=ticket_aberto.id,
                    titulo="Título novo e válido",
                    responsavel_id=outro_usuario.id,
                    define_responsavel=True,
                ),
                solicitante,
            )

        salvo = ticket_repo.get_by_id(ticket_aberto.id)
        assert salvo.titulo == ticket_aberto.titulo
        assert salvo.responsavel_id is None

    def test_responsavel_inexistente(self, atualizar_service, ticket_aberto, admin):
        with pytest.raises(ValidationError) as exc:
            atualizar_service.execute(
                AtualizarTicketInputDTO(
                    ticket_id=ticket_aberto.id,
                    responsavel_id="999",
                    define_responsavel=True,
                ),
                admin,
            )

        assert exc.value.errors == {"responsavel_id": ["O responsável selecionado não existe."]}

    def test_campos_invalidos_nao_aplicam_nada(
        self, atualizar_service, ticket_aberto, ticket_repo, solicitante
    ):
        with pytest.raises(ValidationError) as exc:
            atualizar_service.execute(
                AtualizarTicketInputDTO(
                    ticket_id=ticket_aberto.id,
                    titulo="Título perfeitamente válido",
                    descricao="curta",
                    prioridade="X",
                ),
                solicitante,
            )

        assert set(exc.value.errors) == {"descricao", "prioridade"}
        assert ticket_repo.get_by_id(ticket_aberto.id).titulo == ticket_aberto.titulo

    def test_outro_usuario_e_negado(self, atualizar_service, ticket_aberto, ticket_repo, outro_usuario):
        with pytest.raises(PermissionDeniedError):
            atualizar_service.execute(
                AtualizarTicketInputDTO(ticket_id=ticket_aberto.id, titulo="Tentativa alheia"),
                outro_usuario,
            )

        assert ticket_repo.get_by_id(ticket_aberto.id).titulo == ticket_aberto.titulo

    def test_inexistente_antes_de_permissao(self, atualizar_service, outro_usuario):
        with pytest.raises(EntityNotFoundError):
            atualizar_service.execute(
                AtualizarTicketInputDTO(ticket_id="nao-existe", titulo="Qualquer coisa"),
                outro_usuario,
            )

    def test_atualizar_nao_altera_status_nem_resolvido_em(
        self, atualizar_service, alterar_status_service, ticket_aberto, admin
    ):
        resolvido = _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)

        output = atualizar_service.execute(
            AtualizarTicketInputDTO(ticket_id=ticket_aberto.id, prioridade="ALTA"),
            admin,
        )

        assert output.status == "RESOLVIDO"
        assert output.resolvido_em == resolvido.resolvido_em
        assert len(output.logs) == 1

    def test_sem_alteracoes_nao_publica_evento(self, atualizar_service, ticket_aberto, solicitante, event_publisher):
        atualizar_service.execute(
            AtualizarTicketInputDTO(ticket_id=ticket_aberto.id, titulo=ticket_aberto.titulo),
            solicitante,
        )

        assert event_publisher.get_events_by_type("TicketAtualizadoEvent") == []


# =============================================================================
# Listar
# =============================================================================

class TestListarTicketsService:
    """Testes para ListarTicketsService."""

    @pytest.fixture
    def chamados(self, ticket_repo, novo_ticket):
        dados = [
            ("Impressora travando", "A impressora do financeiro trava sempre", TicketPriority.ALTA, TicketStatus.ABERTO),
            ("VPN desconectando", "Conexão remota cai a cada dez minutos", TicketPriority.MEDIA, TicketStatus.RESOLVIDO),
            ("Monitor com listras", "Listras verticais na tela da IMPRESSORA de etiquetas", TicketPriority.BAIXA, TicketStatus.EM_ANDAMENTO),
            ("Erro no RH", "Módulo de férias retorna erro interno", TicketPriority.ALTA, TicketStatus.RESOLVIDO),
        ]
        tickets = []
        for minutos, (titulo, descricao, prioridade, status) in enumerate(dados):
            ticket = novo_ticket(titulo=titulo, descricao=descricao, prioridade=prioridade, minutos=minutos)
            ticket.alterar_status(status)
            ticket_repo.save(ticket)
            tickets.append(ticket)
        return tickets

    def test_lista_mais_recentes_primeiro(self, listar_service, chamados):
        resultado = listar_service.execute()

        assert resultado.total == 4
        assert [t.titulo for t in resultado.items] == [
            "Erro no RH", "Monitor com listras", "VPN desconectando", "Impressora travando",
        ]
        assert all(t.logs is None for t in resultado.items)

    def test_filtro_por_status(self, listar_service, chamados):
        resultado = listar_service.execute(ListarTicketsQueryDTO(status=TicketStatus.RESOLVIDO))

        assert resultado.total == 2
        assert {t.status for t in resultado.items} == {"RESOLVIDO"}

    def test_filtros_combinados(self, listar_service, chamados):
        resultado = listar_service.execute(
            ListarTicketsQueryDTO(status=TicketStatus.RESOLVIDO, prioridade=TicketPriority.ALTA)
        )

        assert [t.titulo for t in resultado.items] == ["Erro no RH"]

    def test_busca_em_titulo_ou_descricao_sem_caixa(self, listar_service, chamados):
        resultado = listar_service.execute(ListarTicketsQueryDTO(busca="impressora"))

        assert {t.titulo for t in resultado.items} == {"Impressora travando", "Monitor com listras"}

    def test_busca_em_branco_nao_filtra(self, listar_service, chamados):
        assert listar_service.execute(ListarTicketsQueryDTO(busca="   ")).total == 4

    def test_paginacao(self, listar_service, chamados):
        resultado = listar_service.execute(ListarTicketsQueryDTO(pagina=2, por_pagina=3))

        assert [t.titulo for t in resultado.items] == ["Impressora travando"]
        assert resultado.meta() == {
            "total": 4,
            "pagina": 2,
            "por_pagina": 3,
            "total_paginas": 2,
            "tem_proxima": False,
            "tem_anterior": True,
        }

    def test_por_pagina_limitado(self, listar_service, chamados):
        resultado = listar_service.execute(ListarTicketsQueryDTO(pagina=0, por_pagina=500))

        assert resultado.por_pagina == 100
        assert resultado.pagina == 1

    def test_excluidos_nao_aparecem(self, listar_service, ticket_repo, chamados):
        chamados[0].excluir()
        ticket_repo.save(chamados[0])

        assert listar_service.execute().total == 3


# =============================================================================
# Obter e excluir
# =============================================================================

class TestObterTicketService:

    def test_obter_inclui_historico(self, obter_service, alterar_status_service, ticket_aberto, admin, outro_usuario):
        _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.EM_ANDAMENTO, admin)

        output = obter_service.execute(ticket_aberto.id, outro_usuario)

        assert output.id == ticket_aberto.id
        assert len(output.logs) == 1
        assert output.to_dict()["logs"][0]["para"] == "EM_ANDAMENTO"

    def test_obter_inexistente(self, obter_service, admin):
        with pytest.raises(EntityNotFoundError):
            obter_service.execute("nao-existe", admin)


class TestExcluirTicketService:

    def test_solicitante_exclui(
        self, excluir_service, obter_service, alterar_status_service,
        ticket_aberto, ticket_repo, log_repo, solicitante, event_publisher,
    ):
        _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, solicitante)

        excluir_service.execute(ticket_aberto.id, solicitante)

        with pytest.raises(EntityNotFoundError):
            obter_service.execute(ticket_aberto.id, solicitante)
        assert ticket_repo.get_stored(ticket_aberto.id).esta_excluido
        assert len(log_repo.list_by_ticket(ticket_aberto.id)) == 1
        assert isinstance(event_publisher.get_events_by_type("TicketExcluidoEvent")[0], TicketExcluidoEvent)

    def test_outro_usuario_nao_exclui(self, excluir_service, ticket_aberto, ticket_repo, outro_usuario):
        with pytest.raises(PermissionDeniedError):
            excluir_service.execute(ticket_aberto.id, outro_usuario)

        assert ticket_repo.get_by_id(ticket_aberto.id) is not None

    def test_excluir_duas_vezes(self, excluir_service, ticket_aberto, admin):
        excluir_service.execute(ticket_aberto.id, admin)

        with pytest.raises(EntityNotFoundError):
            excluir_service.execute(ticket_aberto.id, admin)

    def test_transicao_em_chamado_excluido(self, excluir_service, alterar_status_service, ticket_aberto, admin):
        excluir_service.execute(ticket_aberto.id, admin)

        with pytest.raises(EntityNotFoundError):
            _transicionar(alterar_status_service, ticket_aberto.id, TicketStatus.RESOLVIDO, admin)
