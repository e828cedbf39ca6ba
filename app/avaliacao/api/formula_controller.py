"""Controlador de fórmulas de avaliação.

Responsabilidades:
- Validar fórmulas de nota final e de média trimestral
- Avaliar fórmulas sobre valores de componentes
- Traduzir erros em respostas HTTP
"""

from fastapi import APIRouter, HTTPException

from avaliacao.api.erros_http import ERROS_TRADUZIVEIS, traduzir_erro
from avaliacao.api.esquemas import (
    RequisicaoAvaliarFormula,
    RequisicaoMediaTrimestral,
    RequisicaoNotaFinalFormula,
    RequisicaoValidarFormula,
    RequisicaoValidarFormulaMT,
    RequisicaoValidarFormulaPonderada,
)
from avaliacao.application.agregador_notas import (
    CalculoFormula,
    calcular_media_trimestral,
    calcular_nota_por_formula,
    configuracao_mt_padrao,
)
from avaliacao.application.avaliador_formula import avaliar_formula
from avaliacao.application.validador_formula import (
    ResultadoValidacao,
    ValidacaoFormulaPonderada,
    validar_formula,
    validar_formula_mt,
    validar_formula_ponderada,
)


class ControladorFormulas:
    """Controlador de fórmulas.

    Responsabilidades:
    - Registrar rotas de validação e avaliação
    """

    def __init__(self):
        self.roteador = APIRouter()
        self._registrar_rotas()

    def _registrar_rotas(self):
        self.roteador.add_api_route(
            path="/formulas/validar",
            endpoint=self._validar,
            methods=["POST"],
            response_model=ResultadoValidacao,
        )
        self.roteador.add_api_route(
            path="/formulas/validar-ponderada",
            endpoint=self._validar_ponderada,
            methods=["POST"],
            response_model=ValidacaoFormulaPonderada,
        )
        self.roteador.add_api_route(
            path="/formulas/validar-mt",
            endpoint=self._validar_mt,
            methods=["POST"],
            response_model=ResultadoValidacao,
        )
        self.roteador.add_api_route(
            path="/formulas/avaliar",
            endpoint=self._avaliar,
            methods=["POST"],
            response_model=dict,
        )
        self.roteador.add_api_route(
            path="/formulas/nota-final",
            endpoint=self._calcular_nota_final,
            methods=["POST"],
            response_model=CalculoFormula,
            summary="Nota final pela fórmula, com detalhamento por componente",
        )
        self.roteador.add_api_route(
            path="/formulas/media-trimestral",
            endpoint=self._calcular_media_trimestral,
            methods=["POST"],
            response_model=dict,
        )

    @staticmethod
    async def _validar(requisicao: RequisicaoValidarFormula):
        return validar_formula(requisicao.expressao, requisicao.codigos_validos)

    @staticmethod
    async def _validar_ponderada(requisicao: RequisicaoValidarFormulaPonderada):
        return validar_formula_ponderada(requisicao.expressao, requisicao.componentes)

    @staticmethod
    async def _validar_mt(requisicao: RequisicaoValidarFormulaMT):
        return validar_formula_mt(requisicao.expressao)

    @staticmethod
    async def _avaliar(requisicao: RequisicaoAvaliarFormula):
        """Avalia a fórmula sobre os valores informados.

        Retorno:
        - dict: {"resultado": float}

        Exceções:
        - HTTPException: 400 para fórmula inválida, valor ausente ou divisão por zero
        """
        try:
            resultado = avaliar_formula(requisicao.expressao, requisicao.valores, estendido=requisicao.estendido)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)
        return {"resultado": resultado}

    @staticmethod
    async def _calcular_nota_final(requisicao: RequisicaoNotaFinalFormula):
        try:
            return calcular_nota_por_formula(requisicao.expressao, requisicao.componentes, requisicao.notas)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _calcular_media_trimestral(requisicao: RequisicaoMediaTrimestral):
        """Calcula a média trimestral; `media_trimestral` é nulo enquanto faltar trimestre."""
        configuracao = requisicao.configuracao or configuracao_mt_padrao(requisicao.tipo_padrao)
        if configuracao.expressao and not configuracao.pesos_trimestres:
            validacao = validar_formula_mt(configuracao.expressao)
            if not validacao.valida:
                raise HTTPException(status_code=400, detail=validacao.erro)
        try:
            media = calcular_media_trimestral(requisicao.notas_trimestres, configuracao)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)
        return {"media_trimestral": media, "descricao": configuracao.descricao}
