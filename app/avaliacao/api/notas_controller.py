"""Controlador de agregação de notas e estatísticas."""

from fastapi import APIRouter

from avaliacao.api.erros_http import ERROS_TRADUZIVEIS, traduzir_erro
from avaliacao.api.esquemas import (
    RequisicaoAgregarNotas,
    RequisicaoEstatisticasLancamento,
    RequisicaoEstatisticasTurma,
)
from avaliacao.application.agregador_notas import (
    EstatisticasLancamento,
    EstatisticasTurma,
    ResultadoNotaFinal,
    calcular_estatisticas_lancamento,
    calcular_estatisticas_turma,
    calcular_nota_final,
)


class ControladorNotas:
    """Controlador de notas.

    Responsabilidades:
    - Combinar notas ponderadas numa nota final
    - Expor estatísticas de lançamento e de turma
    """

    def __init__(self):
        self.roteador = APIRouter()
        self.roteador.add_api_route(
            path="/notas/agregar",
            endpoint=self._agregar,
            methods=["POST"],
            response_model=ResultadoNotaFinal,
        )
        self.roteador.add_api_route(
            path="/notas/estatisticas",
            endpoint=self._estatisticas_lancamento,
            methods=["POST"],
            response_model=EstatisticasLancamento,
        )
        self.roteador.add_api_route(
            path="/notas/estatisticas-turma",
            endpoint=self._estatisticas_turma,
            methods=["POST"],
            response_model=EstatisticasTurma,
        )

    @staticmethod
    async def _agregar(requisicao: RequisicaoAgregarNotas):
        try:
            return calcular_nota_final(requisicao.notas, requisicao.componentes)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _estatisticas_lancamento(requisicao: RequisicaoEstatisticasLancamento):
        return calcular_estatisticas_lancamento(
            requisicao.notas, requisicao.total_alunos, requisicao.limiar_aprovacao
        )

    @staticmethod
    async def _estatisticas_turma(requisicao: RequisicaoEstatisticasTurma):
        return calcular_estatisticas_turma(requisicao.notas_finais)
