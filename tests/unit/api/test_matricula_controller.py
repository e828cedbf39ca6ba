"""Testes do controlador de matrículas."""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from avaliacao.api.matricula_controller import ControladorMatriculas, obter_servico_matricula
from avaliacao.application.matricula_service import ServicoMatricula
from avaliacao.infrastructure.data.matricula_repository import RepositorioMatriculasMemoria

TURMA = {"id": "t1", "escola_id": "e1", "nome": "7ª Classe A", "ano_lectivo": "2025"}
ALUNOS = [{"id": "a1", "frequencia_anual": 90}, {"id": "a2", "frequencia_anual": 90}]
SECUNDARIO = "Ensino Secundário I Ciclo"


def _criar_cliente(servico):
    aplicacao = FastAPI()
    controlador = ControladorMatriculas()

    def override():
        return servico

    aplicacao.dependency_overrides[obter_servico_matricula] = override
    aplicacao.include_router(controlador.roteador, prefix="/api/v1")
    return TestClient(aplicacao)


@pytest.fixture()
def cliente():
    return _criar_cliente(ServicoMatricula(RepositorioMatriculasMemoria()))


def _gerar(cliente):
    resposta = cliente.post("/api/v1/matriculas/gerar", json={"turma": TURMA, "alunos": ALUNOS})
    assert resposta.status_code == 200
    return resposta.json()


def test_gerar_e_listar(cliente):
    geradas = _gerar(cliente)

    assert len(geradas) == 2
    assert geradas[0]["estado_matricula"] == "pendente"
    listadas = cliente.get("/api/v1/matriculas", params={"escola_id": "e1", "ano_lectivo": "2025"}).json()
    assert len(listadas) == 2


def test_obter_inexistente_retorna_404(cliente):
    resposta = cliente.get("/api/v1/matriculas/nao-existe")
    assert resposta.status_code == 404


def test_fluxo_condicional_com_exame(cliente):
    matricula_id = _gerar(cliente)[0]["id"]
    disciplinas = [
        {"id": "d1", "nome": "Língua Portuguesa", "nota": 12},
        {"id": "d2", "nome": "Física", "nota": 8},
    ]

    classificada = cliente.post(
        f"/api/v1/matriculas/{matricula_id}/classificar",
        json={"disciplinas": disciplinas, "nivel_ensino": SECUNDARIO},
    ).json()
    assert classificada["estado_matricula"] == "aguardando_exame"

    bloqueada = cliente.post(f"/api/v1/matriculas/{matricula_id}/confirmar", json={"turma_destino_id": "8A"})
    assert bloqueada.status_code == 409

    exame = cliente.post(
        f"/api/v1/matriculas/{matricula_id}/exame",
        json={"resultado": "aprovado", "nota": 11, "data_exame": "2026-01-15"},
    )
    assert exame.status_code == 200
    assert exame.json()["classe_destino"] == "8ª Classe"

    repetido = cliente.post(f"/api/v1/matriculas/{matricula_id}/exame", json={"resultado": "aprovado", "nota": 11})
    assert repetido.status_code == 409

    confirmada = cliente.post(f"/api/v1/matriculas/{matricula_id}/confirmar", json={"turma_destino_id": "8A"})
    assert confirmada.status_code == 200
    assert confirmada.json()["estado_matricula"] == "confirmada"


def test_confirmar_sem_turma_retorna_400(cliente):
    matricula_id = _gerar(cliente)[0]["id"]
    resposta = cliente.post(f"/api/v1/matriculas/{matricula_id}/confirmar", json={"turma_destino_id": ""})
    assert resposta.status_code == 400


def test_cancelar_confirmada_retorna_409(cliente):
    matricula_id = _gerar(cliente)[0]["id"]
    cliente.post(f"/api/v1/matriculas/{matricula_id}/confirmar", json={"turma_destino_id": "8A"})

    resposta = cliente.post(f"/api/v1/matriculas/{matricula_id}/cancelar")
    assert resposta.status_code == 409
    assert cliente.get(f"/api/v1/matriculas/{matricula_id}").json()["estado_matricula"] == "confirmada"


def test_confirmar_lote_e_resumo(cliente):
    geradas = _gerar(cliente)
    ids = [matricula["id"] for matricula in geradas] + ["nao-existe"]

    relatorio = cliente.post(
        "/api/v1/matriculas/confirmar-lote", json={"ids": ids, "turma_destino_id": "8A"}
    ).json()
    assert relatorio["sucesso"] == 2
    assert relatorio["erros"][0]["id"] == "nao-existe"

    resumo = cliente.get("/api/v1/matriculas/resumo", params={"escola_id": "e1", "ano_lectivo": "2025"}).json()
    assert resumo["total"] == 2
    assert resumo["confirmadas"] == 2


def test_erro_inesperado_nao_vira_400():
    servico = Mock()
    servico.obter_matricula.side_effect = RuntimeError("boom")
    cliente = TestClient(_criar_cliente(servico).app, raise_server_exceptions=False)

    resposta = cliente.get("/api/v1/matriculas/m1")
    assert resposta.status_code == 500
