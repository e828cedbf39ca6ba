"""Agregação de notas de componentes e estatísticas de turma.

Responsabilidades:
- Combinar notas ponderadas numa nota final da disciplina
- Calcular a nota final por fórmula, com detalhamento por componente
- Calcular a média trimestral (MT)
- Produzir estatísticas descritivas de uma turma
"""

import math
from typing import Dict, List, Mapping, Optional

import numpy as np
from pydantic import BaseModel, Field

from avaliacao.application.avaliador_formula import avaliar_formula
from avaliacao.application.validador_formula import (
    ResultadoValidacao,
    normalizar_formula_mt,
    validar_formula_ponderada,
)
from avaliacao.config.settings import Configuracoes
from avaliacao.domain.componente import Componente, ConfiguracaoFormula, NotaComponente, TipoFormula
from avaliacao.domain.erros import ErroAvaliacao, ErroValidacao
from avaliacao.util.arredondamento import arredondar_meio_acima

LIMIAR_APROVACAO = 10
EXCELENTE = "Excelente"
BOM = "Bom"
SUFICIENTE = "Suficiente"
INSUFICIENTE = "Insuficiente"
ROTULOS_CLASSIFICACAO = (EXCELENTE, BOM, SUFICIENTE, INSUFICIENTE)

PESOS_TRIMESTRES_PADRAO = {1: 33.33, 2: 33.33, 3: 33.34}


class ContribuicaoComponente(BaseModel):
    valor: float
    peso: float
    contribuicao: float


class ResultadoNotaFinal(BaseModel):
    """Nota final agregada de uma disciplina."""

    nota_final: float
    classificacao: str
    aprovado: bool
    detalhes: Dict[str, ContribuicaoComponente] = Field(default_factory=dict)
    peso_considerado: float = 0.0


class PassoCalculo(BaseModel):
    componente: str
    valor: float
    peso: float
    contribuicao: float
    calculo: str


class CalculoFormula(BaseModel):
    """Nota final calculada por fórmula e seu detalhamento."""

    nota_final: float
    classificacao: str
    aprovado: bool
    componentes: Dict[str, PassoCalculo] = Field(default_factory=dict)
    expressao_completa: str = ""


class EstatisticasTurma(BaseModel):
    """Estatísticas das notas finais de uma turma."""

    total: int = 0
    aprovados: int = 0
    reprovados: int = 0
    taxa_aprovacao: float = 0.0
    media: float = 0.0
    minima: float = 0.0
    maxima: float = 0.0
    distribuicao: Dict[str, int] = Field(default_factory=lambda: dict.fromkeys(ROTULOS_CLASSIFICACAO, 0))


class EstatisticasLancamento(EstatisticasTurma):
    """Estatísticas do lançamento de um componente, incluindo alunos sem nota."""

    lancadas: int = 0
    pendentes: int = 0


def obter_classificacao(nota: float) -> str:
    """Classificação qualitativa na escala de 0 a 20."""
    if nota >= 17:
        return EXCELENTE
    if nota >= 14:
        return BOM
    if nota >= 10:
        return SUFICIENTE
    return INSUFICIENTE


def _valor_presente(valor: Optional[float]) -> bool:
    return valor is not None and not (isinstance(valor, float) and math.isnan(valor))


def calcular_nota_final(notas: List[NotaComponente], componentes: List[Componente]) -> ResultadoNotaFinal:
    """Agrega as notas dos componentes numa nota final.

    Os pesos são renormalizados sobre os componentes que têm nota: um
    componente sem nota lançada sai das duas somas em vez de contar como zero.

    Parâmetros:
    - notas (list[NotaComponente]): notas lançadas
    - componentes (list[Componente]): componentes com peso percentual

    Retorno:
    - ResultadoNotaFinal: nota, classificação, aprovação e contribuições
    """
    valores = {nota.componente_id: nota.valor for nota in notas if _valor_presente(nota.valor)}
    detalhes: Dict[str, ContribuicaoComponente] = {}
    soma_contribuicoes = 0.0
    soma_pesos = 0.0

    for componente in componentes:
        valor = valores.get(componente.id)
        if valor is None:
            continue
        contribuicao = valor * (componente.peso_percentual / 100)
        detalhes[componente.codigo] = ContribuicaoComponente(
            valor=valor, peso=componente.peso_percentual, contribuicao=contribuicao
        )
        soma_contribuicoes += contribuicao
        soma_pesos += componente.peso_percentual

    nota_final = (soma_contribuicoes / soma_pesos) * 100 if soma_pesos > 0 else 0.0

    return ResultadoNotaFinal(
        nota_final=nota_final,
        classificacao=obter_classificacao(nota_final),
        aprovado=nota_final >= LIMIAR_APROVACAO,
        detalhes=detalhes,
        peso_considerado=soma_pesos,
    )


def calcular_nota_por_formula(
    expressao: str, componentes: List[Componente], notas: Mapping[str, float]
) -> CalculoFormula:
    """Calcula a nota final com a fórmula configurada (política estrita).

    A fórmula só é avaliada se todos os códigos existirem, os pesos dos
    componentes usados somarem 100% e houver nota para cada código.

    Parâmetros:
    - expressao (str): fórmula da disciplina
    - componentes (list[Componente]): componentes configurados
    - notas (Mapping[str, float]): código do componente -> nota

    Retorno:
    - CalculoFormula: nota final, classificação e passos do cálculo

    Exceções:
    - ErroValidacao: fórmula ou pesos inválidos
    - ErroAvaliacao: notas faltando ou resultado não finito
    """
    validacao = validar_formula_ponderada(expressao, componentes)
    if not validacao.valida:
        raise ErroValidacao(validacao.mensagem)

    faltando = [codigo for codigo in validacao.componentes_usados if not _valor_presente(notas.get(codigo))]
    if faltando:
        raise ErroAvaliacao(f"Notas faltando para: {', '.join(faltando)}")

    por_codigo = {componente.codigo: componente for componente in componentes}
    passos: Dict[str, PassoCalculo] = {}
    termos = []
    parcelas = []
    for codigo in validacao.componentes_usados:
        nota = float(notas[codigo])
        peso = por_codigo[codigo].peso_percentual / 100
        contribuicao = nota * peso
        passos[codigo] = PassoCalculo(
            componente=codigo,
            valor=nota,
            peso=peso,
            contribuicao=arredondar_meio_acima(contribuicao, 2),
            calculo=f"{peso:.2f} * {nota:g} = {contribuicao:.2f}",
        )
        termos.append(f"{peso:.2f}*{nota:g}")
        parcelas.append(f"{contribuicao:.2f}")

    nota_final = arredondar_meio_acima(avaliar_formula(expressao, dict(notas), estendido=True), 2)

    return CalculoFormula(
        nota_final=nota_final,
        classificacao=obter_classificacao(nota_final),
        aprovado=nota_final >= LIMIAR_APROVACAO,
        componentes=passos,
        expressao_completa=f"{' + '.join(termos)} = {' + '.join(parcelas)} = {nota_final:g}",
    )


def configuracao_mt_padrao(tipo: str = "simples") -> ConfiguracaoFormula:
    """Configurações pré-definidas da média trimestral."""
    if tipo == "ponderada":
        return ConfiguracaoFormula(
            tipo=TipoFormula.MEDIA_TRIMESTRAL,
            expressao="T1 * 0.3 + T2 * 0.3 + T3 * 0.4",
            pesos_trimestres={1: 30, 2: 30, 3: 40},
            descricao="Média Ponderada (30%, 30%, 40%)",
        )
    if tipo == "custom":
        return ConfiguracaoFormula(
            tipo=TipoFormula.MEDIA_TRIMESTRAL,
            expressao="",
            pesos_trimestres=dict(PESOS_TRIMESTRES_PADRAO),
            descricao="Fórmula Personalizada",
        )
    return ConfiguracaoFormula(
        tipo=TipoFormula.MEDIA_TRIMESTRAL,
        expressao="(T1 + T2 + T3) / 3",
        pesos_trimestres=dict(PESOS_TRIMESTRES_PADRAO),
        descricao="Média Simples",
    )


def calcular_media_trimestral(
    notas_trimestres: Mapping[int, float], configuracao: ConfiguracaoFormula
) -> Optional[float]:
    """Calcula a MT a partir das notas finais dos três trimestres.

    Parâmetros:
    - notas_trimestres (Mapping[int, float]): {1: 16.8, 2: 17.2, 3: 15.5}
    - configuracao (ConfiguracaoFormula): fórmula do tipo MT

    Retorno:
    - float | None: média, ou None enquanto faltar algum trimestre

    Exceções:
    - ErroAvaliacao: fórmula personalizada inválida
    """
    if not all(_valor_presente(notas_trimestres.get(trimestre)) for trimestre in (1, 2, 3)):
        return None

    t1, t2, t3 = (float(notas_trimestres[trimestre]) for trimestre in (1, 2, 3))
    expressao = configuracao.expressao or ""

    if "(t1 + t2 + t3) / 3" in expressao.lower() or expressao.strip().lower() == "simples":
        return (t1 + t2 + t3) / 3

    if configuracao.pesos_trimestres:
        pesos = configuracao.pesos_trimestres
        return (
            t1 * (pesos.get(1) or PESOS_TRIMESTRES_PADRAO[1]) / 100
            + t2 * (pesos.get(2) or PESOS_TRIMESTRES_PADRAO[2]) / 100
            + t3 * (pesos.get(3) or PESOS_TRIMESTRES_PADRAO[3]) / 100
        )

    return avaliar_formula(normalizar_formula_mt(expressao), {"T1": t1, "T2": t2, "T3": t3}, estendido=True)


def validar_valor_nota(
    valor: float,
    escala_minima: float = Configuracoes.ESCALA_MINIMA,
    escala_maxima: float = Configuracoes.ESCALA_MAXIMA,
) -> ResultadoValidacao:
    """Confere se a nota está dentro da escala do componente."""
    if valor is None or math.isnan(valor):
        return ResultadoValidacao(valida=False, erro="Valor inválido")
    if valor < escala_minima or valor > escala_maxima:
        return ResultadoValidacao(valida=False, erro=f"Nota deve estar entre {escala_minima:g} e {escala_maxima:g}")
    return ResultadoValidacao(valida=True)


def calcular_estatisticas_turma(notas_finais: List[float]) -> EstatisticasTurma:
    """Estatísticas descritivas das notas finais de uma turma.

    Lista vazia devolve todos os campos zerados.
    """
    notas = np.array([nota for nota in notas_finais if _valor_presente(nota)], dtype=float)
    if notas.size == 0:
        return EstatisticasTurma()

    aprovados = int((notas >= LIMIAR_APROVACAO).sum())
    distribuicao = dict.fromkeys(ROTULOS_CLASSIFICACAO, 0)
    for nota in notas:
        distribuicao[obter_classificacao(float(nota))] += 1

    return EstatisticasTurma(
        total=int(notas.size),
        aprovados=aprovados,
        reprovados=int(notas.size) - aprovados,
        taxa_aprovacao=aprovados / notas.size * 100,
        media=float(np.mean(notas)),
        minima=float(np.min(notas)),
        maxima=float(np.max(notas)),
        distribuicao=distribuicao,
    )


def calcular_estatisticas_lancamento(
    notas: Mapping[str, Optional[float]], total_alunos: int, limiar_aprovacao: float = LIMIAR_APROVACAO
) -> EstatisticasLancamento:
    """Estatísticas do lançamento de notas de um componente.

    Parâmetros:
    - notas (Mapping[str, float | None]): aluno -> nota lançada
    - total_alunos (int): alunos da turma, com ou sem nota
    - limiar_aprovacao (float): nota mínima de aprovação

    Retorno:
    - EstatisticasLancamento: médias com 2 casas e taxa com 1 casa
    """
    valores = np.array([valor for valor in notas.values() if _valor_presente(valor)], dtype=float)
    if valores.size == 0:
        return EstatisticasLancamento(total=total_alunos, pendentes=total_alunos)

    aprovados = int((valores >= limiar_aprovacao).sum())
    distribuicao = dict.fromkeys(ROTULOS_CLASSIFICACAO, 0)
    for valor in valores:
        distribuicao[obter_classificacao(float(valor))] += 1

    casas = Configuracoes.CASAS_DECIMAIS
    return EstatisticasLancamento(
        total=total_alunos,
        lancadas=int(valores.size),
        pendentes=total_alunos - int(valores.size),
        aprovados=aprovados,
        reprovados=int(valores.size) - aprovados,
        taxa_aprovacao=arredondar_meio_acima(aprovados / valores.size * 100, 1),
        media=arredondar_meio_acima(float(np.mean(valores)), casas),
        minima=arredondar_meio_acima(float(np.min(valores)), casas),
        maxima=arredondar_meio_acima(float(np.max(valores)), casas),
        distribuicao=distribuicao,
    )
