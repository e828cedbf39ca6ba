"""Testes do validador de fórmulas."""

import pytest

from avaliacao.application.avaliador_formula import avaliar_formula
from avaliacao.application.validador_formula import (
    exigir_formula_valida,
    extrair_codigos,
    normalizar_formula_mt,
    validar_formula,
    validar_formula_mt,
    validar_formula_ponderada,
)
from avaliacao.domain.componente import Componente
from avaliacao.domain.erros import ErroValidacao

CODIGOS = {"MAC", "NPP", "NPT", "EXAME"}


def test_formula_valida():
    resultado = validar_formula("MAC * 0.4 + NPP * 0.3 + NPT * 0.3", CODIGOS)
    assert resultado.valida is True
    assert resultado.erro is None


@pytest.mark.parametrize(
    "expressao, erro",
    [
        ("", "Fórmula não pode estar vazia"),
        ("   ", "Fórmula não pode estar vazia"),
        ("MAC * 0.4 + NPP$", "Fórmula contém caracteres inválidos"),
        ("MAC % 2", "Fórmula contém caracteres inválidos"),
        ("(MAC + NPP", "Parênteses desbalanceados"),
        (")MAC + NPP(", "Parênteses desbalanceados"),
        ("MAC + PROVA", 'Componente "PROVA" não existe ou não está disponível'),
        ("MAC ++ NPP", "Operadores consecutivos detectados"),
        ("MAC */ NPP", "Operadores consecutivos detectados"),
    ],
)
def test_verificacoes_em_ordem(expressao, erro):
    resultado = validar_formula(expressao, CODIGOS)
    assert resultado.valida is False
    assert resultado.erro == erro


def test_caracteres_verificados_antes_dos_parenteses():
    resultado = validar_formula("(MAC + PROVA$", CODIGOS)
    assert resultado.erro == "Fórmula contém caracteres inválidos"


def test_parenteses_verificados_antes_dos_codigos():
    resultado = validar_formula("(MAC + PROVA", CODIGOS)
    assert resultado.erro == "Parênteses desbalanceados"


def test_sinal_antes_de_digito_nao_e_operador_duplo():
    assert validar_formula("MAC * -2 + 30", CODIGOS).valida is True
    assert validar_formula("MAC - -1", CODIGOS).valida is True


def test_sintaxe_incompleta_e_rejeitada():
    resultado = validar_formula("MAC +", CODIGOS)
    assert resultado.valida is False
    assert resultado.erro.startswith("Erro de sintaxe na fórmula")


def test_identificador_minusculo_nao_escapa_da_validacao():
    resultado = validar_formula("MAC + mac", CODIGOS)
    assert resultado.valida is False


def test_funcoes_nao_sao_aceitas_na_validacao_basica():
    resultado = validar_formula("max(MAC, NPP)", CODIGOS)
    assert resultado.valida is False


@pytest.mark.parametrize(
    "expressao",
    ["MAC * 0.4 + NPP * 0.6", "(MAC + NPP + NPT) / 3", "EXAME", "-MAC + 20", "MAC * 1.5 - 2"],
)
def test_formula_valida_sempre_avalia(expressao):
    assert validar_formula(expressao, CODIGOS).valida is True
    valores = {codigo: 10 for codigo in CODIGOS}
    assert isinstance(avaliar_formula(expressao, valores, estendido=False), float)


def test_exigir_formula_valida_lanca_erro():
    with pytest.raises(ErroValidacao, match="Parênteses desbalanceados"):
        exigir_formula_valida("(MAC", CODIGOS)


def test_extrair_codigos_ignora_numeros_e_repete_uma_vez():
    assert extrair_codigos("MAC * 0.4 + MAC2 * 0.6 + MAC + 2E") == ["MAC", "MAC2"]


def _componentes(*pares):
    return [
        Componente(id=f"c{indice}", codigo=codigo, peso_percentual=peso)
        for indice, (codigo, peso) in enumerate(pares)
    ]


def test_formula_ponderada_valida():
    componentes = _componentes(("MAC", 40), ("NPP", 30), ("NPT", 30))
    resultado = validar_formula_ponderada("MAC*0.4 + NPP*0.3 + NPT*0.3", componentes)

    assert resultado.valida is True
    assert resultado.componentes_usados == ["MAC", "NPP", "NPT"]
    assert resultado.peso_total == 100
    assert resultado.mensagem == "Fórmula válida. Pesos somam 100%."


def test_formula_ponderada_pesos_incompletos():
    componentes = _componentes(("MAC", 40), ("NPP", 30), ("NPT", 30))
    resultado = validar_formula_ponderada("MAC*0.4 + NPP*0.3", componentes)

    assert resultado.valida is False
    assert resultado.mensagem == "Os pesos dos componentes devem somar 100%. Atual: 70%"


def test_formula_ponderada_tolera_arredondamento_dos_pesos():
    componentes = _componentes(("T1", 33.33), ("T2", 33.33), ("T3", 33.34))
    assert validar_formula_ponderada("(T1 + T2 + T3) / 3", componentes).valida is True


def test_formula_ponderada_componente_inexistente():
    componentes = _componentes(("MAC", 100))
    resultado = validar_formula_ponderada("MAC + PROVA", componentes)
    assert resultado.mensagem == "Componentes não encontrados: PROVA"


def test_formula_ponderada_aceita_funcoes():
    componentes = _componentes(("MAC", 50), ("EXAME", 50))
    resultado = validar_formula_ponderada("max(MAC, EXAME)", componentes)
    assert resultado.valida is True
    assert resultado.componentes_usados == ["MAC", "EXAME"]


def test_formula_ponderada_vazia():
    assert validar_formula_ponderada("", []).mensagem == "Fórmula não pode estar vazia"


def test_formula_mt_valida():
    assert validar_formula_mt("(T1 + T2 + T3) / 3").valida is True
    assert validar_formula_mt("t1 * 0.3 + t2 * 0.3 + t3 * 0.4").valida is True


@pytest.mark.parametrize(
    "expressao, erro",
    [
        ("", "Fórmula não pode estar vazia"),
        ("T1 + T2", "Fórmula deve incluir T1, T2 e T3"),
        ("T1 + T2 + T3 + X", "Fórmula contém caracteres inválidos"),
        ("(T1 + T2 + T3) / 0", "Fórmula não produz um número válido"),
        ("T1 + T2 + T3 +", "Erro de sintaxe na fórmula"),
    ],
)
def test_formula_mt_invalida(expressao, erro):
    resultado = validar_formula_mt(expressao)
    assert resultado.valida is False
    assert resultado.erro == erro


def test_normalizar_formula_mt():
    assert normalizar_formula_mt("(t1 + T2 + t3) / 3") == "(T1 + T2 + T3) / 3"
