"""Validação estática de fórmulas antes do cálculo.

Responsabilidades:
- Verificar caracteres, parênteses, operadores e códigos referenciados
- Verificar que os pesos dos componentes usados somam 100%
- Validar fórmulas de média trimestral (T1, T2, T3)
"""

import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from avaliacao.application.avaliador_formula import (
    FUNCOES_PERMITIDAS,
    analisar_expressao,
    avaliar_formula,
    codigos_da_arvore,
)
from avaliacao.domain.componente import Componente
from avaliacao.domain.erros import ErroAvaliacao, ErroValidacao

TOLERANCIA_PESOS = 0.01

_CARACTERES_VALIDOS = re.compile(r"^[A-Za-z0-9+\-*/().]+$")
_CARACTERES_VALIDOS_MT = re.compile(r"^[T0-9+\-*/(). ]+$", re.IGNORECASE)
_CODIGO_COMPONENTE = re.compile(r"(?<![A-Za-z0-9_.])[A-Z][A-Z0-9_]*")
_IDENTIFICADOR = re.compile(r"\b([a-zA-Z_][a-zA-Z0-9_]*)\b")
_SINAL_DE_NUMERO = re.compile(r"[+\-]\d")
_OPERADORES_CONSECUTIVOS = re.compile(r"[+\-*/]{2,}")
_VARIAVEL_TRIMESTRE = re.compile(r"\bt([123])\b", re.IGNORECASE)


class ResultadoValidacao(BaseModel):
    """Resultado da validação de uma fórmula."""

    valida: bool
    erro: Optional[str] = None


class ValidacaoFormulaPonderada(BaseModel):
    """Resultado da validação de uma fórmula contra os pesos configurados."""

    valida: bool = False
    mensagem: str = ""
    componentes_usados: List[str] = Field(default_factory=list)
    peso_total: float = 0.0


def extrair_codigos(expressao: str) -> List[str]:
    """Extrai os códigos de componentes (sequências iniciadas por maiúscula).

    Literais numéricos nunca são confundidos com códigos.

    Retorno:
    - list: códigos únicos na ordem em que aparecem
    """
    return list(dict.fromkeys(_CODIGO_COMPONENTE.findall(expressao or "")))


def validar_formula(expressao: str, codigos_validos: Iterable[str]) -> ResultadoValidacao:
    """Valida uma fórmula de nota, parando na primeira falha.

    Ordem das verificações: vazia, caracteres, parênteses, códigos
    existentes, operadores consecutivos e, por fim, a sintaxe completa.

    Parâmetros:
    - expressao (str): fórmula, ex.: "MAC * 0.4 + EXAME * 0.6"
    - codigos_validos (Iterable[str]): códigos disponíveis para a disciplina

    Retorno:
    - ResultadoValidacao: `valida` e mensagem de `erro` quando inválida
    """
    if not expressao or not expressao.strip():
        return ResultadoValidacao(valida=False, erro="Fórmula não pode estar vazia")

    codigos_validos = set(codigos_validos)
    expressao_limpa = re.sub(r"\s+", "", expressao)

    if not _CARACTERES_VALIDOS.match(expressao_limpa):
        return ResultadoValidacao(valida=False, erro="Fórmula contém caracteres inválidos")

    contador = 0
    for caractere in expressao_limpa:
        if caractere == "(":
            contador += 1
        elif caractere == ")":
            contador -= 1
        if contador < 0:
            return ResultadoValidacao(valida=False, erro="Parênteses desbalanceados")
    if contador != 0:
        return ResultadoValidacao(valida=False, erro="Parênteses desbalanceados")

    for codigo in extrair_codigos(expressao):
        if codigo not in codigos_validos:
            return ResultadoValidacao(
                valida=False, erro=f'Componente "{codigo}" não existe ou não está disponível'
            )

    # Um sinal imediatamente antes de dígito é sinal do número, não operador.
    if _OPERADORES_CONSECUTIVOS.search(_SINAL_DE_NUMERO.sub("", expressao_limpa)):
        return ResultadoValidacao(valida=False, erro="Operadores consecutivos detectados")

    try:
        arvore = analisar_expressao(expressao, estendido=False)
    except ErroAvaliacao as erro:
        return ResultadoValidacao(valida=False, erro=f"Erro de sintaxe na fórmula: {erro}")

    desconhecidos = sorted(codigos_da_arvore(arvore) - codigos_validos)
    if desconhecidos:
        return ResultadoValidacao(
            valida=False, erro=f'Componente "{desconhecidos[0]}" não existe ou não está disponível'
        )

    return ResultadoValidacao(valida=True)


def exigir_formula_valida(expressao: str, codigos_validos: Iterable[str]) -> None:
    """Valida a fórmula e lança exceção em caso de falha.

    Exceções:
    - ErroValidacao: com a mensagem da primeira verificação que falhou
    """
    resultado = validar_formula(expressao, codigos_validos)
    if not resultado.valida:
        raise ErroValidacao(resultado.erro)


def validar_formula_ponderada(expressao: str, componentes: List[Componente]) -> ValidacaoFormulaPonderada:
    """Valida fórmula estendida e exige que os pesos dos componentes usados somem 100%.

    Parâmetros:
    - expressao (str): fórmula, pode usar min/max/round/if
    - componentes (list[Componente]): componentes configurados na disciplina

    Retorno:
    - ValidacaoFormulaPonderada: códigos usados, soma dos pesos e mensagem
    """
    resultado = ValidacaoFormulaPonderada()
    identificadores = _IDENTIFICADOR.findall(expressao or "")
    usados = [nome for nome in identificadores if nome.lower() not in FUNCOES_PERMITIDAS]
    resultado.componentes_usados = list(dict.fromkeys(usados))

    if not (expressao or "").strip():
        resultado.mensagem = "Fórmula não pode estar vazia"
        return resultado

    disponiveis = {componente.codigo: componente for componente in componentes}
    faltantes = [codigo for codigo in resultado.componentes_usados if codigo not in disponiveis]
    if faltantes:
        resultado.mensagem = f"Componentes não encontrados: {', '.join(faltantes)}"
        return resultado

    resultado.peso_total = sum(disponiveis[codigo].peso_percentual for codigo in resultado.componentes_usados)
    if abs(resultado.peso_total - 100) > TOLERANCIA_PESOS:
        resultado.mensagem = f"Os pesos dos componentes devem somar 100%. Atual: {resultado.peso_total:g}%"
        return resultado

    try:
        analisar_expressao(expressao, estendido=True)
    except ErroAvaliacao as erro:
        resultado.mensagem = f"Erro de sintaxe na fórmula: {erro}"
        return resultado

    resultado.valida = True
    resultado.mensagem = "Fórmula válida. Pesos somam 100%."
    return resultado


def normalizar_formula_mt(expressao: str) -> str:
    """Padroniza t1/t2/t3 para T1/T2/T3."""
    return _VARIAVEL_TRIMESTRE.sub(lambda m: f"T{m.group(1)}", expressao)


def validar_formula_mt(expressao: str) -> ResultadoValidacao:
    """Valida a fórmula da média trimestral, que deve usar T1, T2 e T3."""
    if not expressao or not expressao.strip():
        return ResultadoValidacao(valida=False, erro="Fórmula não pode estar vazia")

    if not all(re.search(f"T{t}", expressao, re.IGNORECASE) for t in (1, 2, 3)):
        return ResultadoValidacao(valida=False, erro="Fórmula deve incluir T1, T2 e T3")

    if not _CARACTERES_VALIDOS_MT.match(expressao):
        return ResultadoValidacao(valida=False, erro="Fórmula contém caracteres inválidos")

    try:
        avaliar_formula(normalizar_formula_mt(expressao), {"T1": 15, "T2": 16, "T3": 17}, estendido=False)
    except ErroAvaliacao as erro:
        mensagem = str(erro)
        if "finito" in mensagem or "Divisão" in mensagem:
            return ResultadoValidacao(valida=False, erro="Fórmula não produz um número válido")
        return ResultadoValidacao(valida=False, erro="Erro de sintaxe na fórmula")

    return ResultadoValidacao(valida=True)
