"""Testes do classificador de transição de ano."""

import pytest
from pydantic import ValidationError

from avaliacao.application.classificador_transicao import (
    ClassificadorTransicao,
    calcular_classificacao_turma,
    calcular_media_geral,
    classificar_aluno,
    disciplina_obrigatoria,
    extrair_numero_classe,
    frequencia_suficiente,
    gerar_observacao,
)
from avaliacao.domain.classificacao import AvaliacaoAnualAluno, NivelEnsino, NotaDisciplina, StatusTransicao

PRIMARIO = "Ensino Primário"
SECUNDARIO = "Ensino Secundário I Ciclo"


def _disciplinas(*notas):
    nomes = ["Língua Portuguesa", "Matemática", "Física", "Química", "História", "Geografia"]
    return [NotaDisciplina(id=f"d{indice}", nome=nomes[indice], nota=nota) for indice, nota in enumerate(notas)]


def test_sem_notas_aguarda():
    resultado = ClassificadorTransicao.classificar([], SECUNDARIO, "10ª Classe", frequencia=10)
    assert resultado.status == StatusTransicao.AGUARDANDO_NOTAS
    assert resultado.observacao_padronizada == "Aguardando notas para determinar transição."


@pytest.mark.parametrize("nivel", [PRIMARIO, SECUNDARIO])
def test_frequencia_insuficiente_prevalece_sobre_notas(nivel):
    resultado = ClassificadorTransicao.classificar(_disciplinas(20, 20, 20), nivel, "7ª Classe", frequencia=60)

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.observacao_padronizada == (
        "Não transitou por frequência insuficiente (60.00%, inferior ao mínimo de 66,67%)."
    )
    assert "Frequência insuficiente" in resultado.motivo_retencao


def test_frequencia_no_limite_e_suficiente():
    assert frequencia_suficiente(66.67) is True
    assert frequencia_suficiente(66.66) is False
    assert frequencia_suficiente(None) is True


def test_primario_transita_com_cinco():
    resultado = classificar_aluno(_disciplinas(5, 5, 5), PRIMARIO, "4ª Classe", frequencia=90)

    assert resultado.status == StatusTransicao.TRANSITA
    assert resultado.observacao_padronizada == (
        "Transitou por ter obtido classificação igual ou superior a 5 valores "
        "em todas as disciplinas e frequência de 90.00%."
    )


def test_primario_arredonda_antes_do_limiar():
    resultado = classificar_aluno(_disciplinas(4.4, 10, 10), PRIMARIO, "4ª Classe")

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.disciplinas_em_risco == ["Língua Portuguesa"]

    assert classificar_aluno(_disciplinas(4.5, 10, 10), PRIMARIO).status == StatusTransicao.TRANSITA


def test_secundario_piso_sete_sem_excecao():
    resultado = classificar_aluno(_disciplinas(12, 6.4, 15), SECUNDARIO, "7ª Classe", frequencia=90)

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.disciplinas_em_risco == ["Matemática"]
    assert "inferior a 7 valores" in resultado.observacao_padronizada


def test_secundario_arredondamento_salva_do_piso():
    resultado = classificar_aluno(_disciplinas(12, 6.5, 15), SECUNDARIO, "7ª Classe", frequencia=90)
    assert resultado.status == StatusTransicao.CONDICIONAL


def test_setima_classe_duas_nao_obrigatorias_condicional():
    resultado = classificar_aluno(_disciplinas(12, 11, 8, 9), SECUNDARIO, "7ª Classe", frequencia=90)

    assert resultado.status == StatusTransicao.CONDICIONAL
    assert resultado.matricula_condicional is True
    assert resultado.disciplinas_em_risco == ["Física", "Química"]
    assert resultado.observacao_padronizada.startswith(
        "Transitou condicionalmente com 2 disciplina(s) entre 7 e 9 valores: Física, Química."
    )


def test_setima_classe_portugues_e_matematica_nao_transita():
    resultado = classificar_aluno(_disciplinas(8, 9, 12, 13), SECUNDARIO, "7ª Classe", frequencia=90)

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.matricula_condicional is False
    assert resultado.observacao_padronizada == (
        "Não transitou por ter obtido classificação inferior a 10 valores simultaneamente "
        "em Língua Portuguesa e Matemática."
    )


def test_oitava_classe_uma_obrigatoria_condicional():
    resultado = classificar_aluno(_disciplinas(8, 12, 9, 13), SECUNDARIO, "8ª Classe")
    assert resultado.status == StatusTransicao.CONDICIONAL


def test_obrigatorias_configuradas_por_id():
    disciplinas = _disciplinas(12, 11, 8, 9)
    resultado = classificar_aluno(disciplinas, SECUNDARIO, "7ª Classe", ids_obrigatorias=["d2", "d3"])
    assert resultado.status == StatusTransicao.NAO_TRANSITA


def test_setima_classe_mais_de_duas_em_risco():
    resultado = classificar_aluno(_disciplinas(8, 12, 9, 7), SECUNDARIO, "7ª Classe")

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert len(resultado.disciplinas_em_risco) == 3


def test_nona_classe_sem_excecao():
    resultado = classificar_aluno(_disciplinas(12, 11, 9), SECUNDARIO, "9ª Classe", frequencia=90)

    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.motivo_retencao.startswith("9ª Classe requer todas as disciplinas")


def test_regra_geral_secundario():
    resultado = classificar_aluno(_disciplinas(12, 9.4, 15), SECUNDARIO, "10ª Classe")
    assert resultado.status == StatusTransicao.NAO_TRANSITA
    assert resultado.disciplinas_em_risco == ["Matemática"]

    assert classificar_aluno(_disciplinas(12, 9.5, 15), SECUNDARIO, "10ª Classe").status == StatusTransicao.TRANSITA


def test_secundario_sem_frequencia_usa_na():
    resultado = classificar_aluno(_disciplinas(12, 12), SECUNDARIO, "11ª Classe")
    assert resultado.status == StatusTransicao.TRANSITA
    assert "frequência de N/A%" in resultado.observacao_padronizada


def test_classificacao_e_pura():
    disciplinas = _disciplinas(12, 11, 8, 9)
    primeiro = classificar_aluno(disciplinas, SECUNDARIO, "7ª Classe", frequencia=80)
    segundo = classificar_aluno(disciplinas, SECUNDARIO, "7ª Classe", frequencia=80)

    assert primeiro == segundo
    assert primeiro is not segundo
    assert [disciplina.nota for disciplina in disciplinas] == [12, 11, 8, 9]


def test_nivel_de_ensino_a_partir_do_rotulo():
    assert NivelEnsino.a_partir_de("Ensino Primário") == NivelEnsino.PRIMARIO
    assert NivelEnsino.a_partir_de("ensino primario") == NivelEnsino.PRIMARIO
    assert NivelEnsino.a_partir_de("Ensino Secundário II Ciclo") == NivelEnsino.SECUNDARIO
    assert NivelEnsino.a_partir_de(None) == NivelEnsino.SECUNDARIO


@pytest.mark.parametrize(
    "classe, numero",
    [("7ª Classe", 7), ("10º ano", 10), ("8", 8), ("Classe 12ª", 12), ("Iniciação", None), (None, None)],
)
def test_extrair_numero_classe(classe, numero):
    assert extrair_numero_classe(classe) == numero


def test_disciplina_obrigatoria_por_nome():
    assert disciplina_obrigatoria(NotaDisciplina(id="x", nome="Lingua Portuguesa", nota=10)) is True
    assert disciplina_obrigatoria(NotaDisciplina(id="x", nome="MATEMÁTICA", nota=10)) is True
    assert disciplina_obrigatoria(NotaDisciplina(id="x", nome="Física", nota=10)) is False


def test_gerar_observacao_nao_transita_sem_disciplinas():
    assert gerar_observacao(StatusTransicao.NAO_TRANSITA, 10) == (
        "Não transitou por não atingir os critérios mínimos de aprovação."
    )


def test_media_geral():
    assert calcular_media_geral(_disciplinas(10, 11, 12)) == 11
    assert calcular_media_geral(_disciplinas(10, 11, 11)) == 10.67
    assert calcular_media_geral([]) == 0


def test_classificacao_da_turma():
    avaliacoes = [
        AvaliacaoAnualAluno(aluno_id="a1", nome="Ana", disciplinas=_disciplinas(12, 13, 14), frequencia=90),
        AvaliacaoAnualAluno(aluno_id="a2", nome="Bruno", disciplinas=_disciplinas(12, 5, 9), frequencia=90),
        AvaliacaoAnualAluno(aluno_id="a3", nome="Carla", disciplinas=[]),
    ]
    turma = calcular_classificacao_turma(avaliacoes, SECUNDARIO, "7ª Classe")

    assert turma.erros == []
    status = {resultado.aluno_id: resultado.classificacao.status for resultado in turma.resultados}
    assert status == {
        "a1": StatusTransicao.TRANSITA,
        "a2": StatusTransicao.NAO_TRANSITA,
        "a3": StatusTransicao.AGUARDANDO_NOTAS,
    }
    assert turma.resultados[0].media_geral == 13
    assert turma.resultados[2].media_geral == 0


@pytest.mark.parametrize("nota_invalida", [float("inf"), float("-inf"), float("nan")])
def test_classificacao_da_turma_isola_nota_nao_finita(nota_invalida):
    # model_construct simula um chamador que não passou pela validação do modelo
    nota_corrompida = NotaDisciplina.model_construct(id="d0", nome="Língua Portuguesa", nota=nota_invalida)
    avaliacoes = [
        AvaliacaoAnualAluno(aluno_id="a1", disciplinas=[nota_corrompida, *_disciplinas(12)]),
        AvaliacaoAnualAluno(aluno_id="a2", disciplinas=_disciplinas(12, 12)),
    ]
    turma = calcular_classificacao_turma(avaliacoes, "Ensino Secundário", "9ª Classe")

    assert [falha.aluno_id for falha in turma.erros] == ["a1"]
    assert "não finito" in turma.erros[0].erro
    assert [resultado.aluno_id for resultado in turma.resultados] == ["a2"]
    assert turma.resultados[0].classificacao.status == StatusTransicao.TRANSITA


@pytest.mark.parametrize("nota", [-3, 20.5, 250, float("inf"), float("nan")])
def test_nota_disciplina_fora_da_escala_rejeitada(nota):
    with pytest.raises(ValidationError):
        NotaDisciplina(id="d2", nome="Química", nota=nota)


def test_nota_disciplina_aceita_limites_da_escala():
    assert NotaDisciplina(id="d0", nome="Física", nota=0).nota == 0
    assert NotaDisciplina(id="d1", nome="Física", nota=20).nota == 20
