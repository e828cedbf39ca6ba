"""Testes do importador de pautas."""

import pandas as pd
import pytest

from avaliacao.domain.erros import ErroValidacao
from avaliacao.infrastructure.data.importador_notas import ImportadorNotas


def _pauta(linhas):
    return pd.DataFrame(linhas, columns=["Nº Processo", "Nome", "Disciplina_ID", "Disciplina", "Nota", "Frequência"])


def test_agrupa_notas_por_aluno():
    df = _pauta(
        [
            ["001", "Ana", "d1", "Língua Portuguesa", "12", "95"],
            ["001", "Ana", "d2", "Matemática", "14,5", "95"],
            ["002", "Bruno", "d1", "Língua Portuguesa", "9", ""],
        ]
    )
    resultado = ImportadorNotas().importar_dataframe(df)

    assert resultado.erros == []
    assert resultado.linhas_importadas == 3
    ana, bruno = resultado.avaliacoes
    assert ana.aluno_id == "001"
    assert ana.nome == "Ana"
    assert ana.frequencia == 95
    assert [d.nota for d in ana.disciplinas] == [12, 14.5]
    assert bruno.frequencia is None


def test_nota_vazia_e_ignorada_e_nao_vira_zero():
    df = _pauta([["001", "Ana", "d1", "LP", "", ""], ["001", "Ana", "d2", "MAT", "0", ""]])
    resultado = ImportadorNotas().importar_dataframe(df)

    assert resultado.linhas_sem_nota == 1
    assert [d.nota for d in resultado.avaliacoes[0].disciplinas] == [0]


def test_erros_por_linha():
    df = _pauta(
        [
            ["001", "Ana", "d1", "LP", "doze", ""],
            ["001", "Ana", "d2", "MAT", "21", ""],
            ["999", "X", "d1", "LP", "10", ""],
            ["", "Y", "d1", "LP", "10", ""],
            ["001", "Ana", "d3", "FIS", "11", ""],
        ]
    )
    resultado = ImportadorNotas().importar_dataframe(df, alunos_conhecidos=["001"])

    assert [(erro.linha, erro.erro) for erro in resultado.erros] == [
        (1, "Nota não numérica: doze"),
        (2, "Nota deve estar entre 0 e 20"),
        (3, "Aluno desconhecido: 999"),
        (4, "Número de processo ausente"),
    ]
    assert resultado.linhas_importadas == 1


def test_contrato_exige_colunas():
    df = pd.DataFrame({"NUMERO_PROCESSO": ["1"], "NOTA": ["10"]})
    with pytest.raises(ErroValidacao, match="colunas obrigatórias ausentes"):
        ImportadorNotas().importar_dataframe(df)


def test_contrato_rejeita_pauta_vazia():
    with pytest.raises(ErroValidacao):
        ImportadorNotas().importar_dataframe(pd.DataFrame())


def test_importar_arquivo_com_ponto_e_virgula(tmp_path):
    arquivo = tmp_path / "pauta.csv"
    arquivo.write_text(
        "NUMERO_PROCESSO;DISCIPLINA_ID;DISCIPLINA;NOTA\n007;d1;Matemática;13\n007;d2;Física;\n",
        encoding="utf-8",
    )
    resultado = ImportadorNotas().importar_arquivo(str(arquivo))

    assert resultado.avaliacoes[0].aluno_id == "007"
    assert resultado.linhas_sem_nota == 1


def test_importar_arquivo_com_virgula(tmp_path):
    arquivo = tmp_path / "pauta.csv"
    arquivo.write_text("MF,NUMERO_PROCESSO,DISCIPLINA_ID,DISCIPLINA\n15,1,d1,LP\n", encoding="utf-8")
    resultado = ImportadorNotas().importar_arquivo(str(arquivo))

    assert resultado.avaliacoes[0].disciplinas[0].nota == 15
