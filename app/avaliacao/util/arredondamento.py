"""Arredondamento comercial (meio para cima) usado nas pautas."""

import math

from avaliacao.domain.erros import ErroAvaliacao


def arredondar_meio_acima(valor: float, casas: int = 0) -> float:
    """Arredonda com desempate para cima (4.5 -> 5), ao contrário de `round`.

    Parâmetros:
    - valor (float): número a arredondar
    - casas (int): casas decimais mantidas

    Retorno:
    - float: valor arredondado

    Exceções:
    - ErroAvaliacao: valor infinito ou NaN
    """
    if not math.isfinite(valor):
        raise ErroAvaliacao(f"Valor não finito não pode ser arredondado: {valor}")
    fator = 10 ** casas
    return math.floor(valor * fator + 0.5) / fator
