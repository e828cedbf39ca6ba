"""Testes do arredondamento meio para cima."""

import pytest

from avaliacao.domain.erros import ErroAvaliacao
from avaliacao.util.arredondamento import arredondar_meio_acima


def test_desempate_sobe_ao_contrario_de_round():
    assert arredondar_meio_acima(4.5) == 5
    assert arredondar_meio_acima(6.5) == 7
    assert arredondar_meio_acima(9.5) == 10
    assert round(4.5) == 4


def test_valores_abaixo_do_meio_descem():
    assert arredondar_meio_acima(4.49) == 4
    assert arredondar_meio_acima(6.4) == 6


def test_casas_decimais():
    assert arredondar_meio_acima(12.345, 1) == 12.3
    assert arredondar_meio_acima(12.25, 1) == 12.3
    assert arredondar_meio_acima(12.26, 1) == 12.3
    assert arredondar_meio_acima(13.125, 2) == 13.13


def test_negativos_arredondam_para_cima():
    assert arredondar_meio_acima(-2.5) == -2


@pytest.mark.parametrize("valor", [float("inf"), float("-inf"), float("nan")])
def test_valor_nao_finito_rejeitado(valor):
    with pytest.raises(ErroAvaliacao, match="não finito"):
        arredondar_meio_acima(valor)
