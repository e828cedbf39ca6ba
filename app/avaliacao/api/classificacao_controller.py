"""Controlador de classificação de transição de ano."""

from fastapi import APIRouter

from avaliacao.api.erros_http import ERROS_TRADUZIVEIS, traduzir_erro
from avaliacao.api.esquemas import RequisicaoClassificacao, RequisicaoClassificacaoTurma
from avaliacao.application.classificador_transicao import ClassificadorTransicao, calcular_classificacao_turma
from avaliacao.domain.classificacao import ClassificacaoTurma, ResultadoClassificacao


class ControladorClassificacao:
    """Controlador de classificação.

    Responsabilidades:
    - Classificar um aluno
    - Classificar uma turma inteira com falhas por aluno
    """

    def __init__(self):
        self.roteador = APIRouter()
        self.roteador.add_api_route(
            path="/classificacao",
            endpoint=self._classificar,
            methods=["POST"],
            response_model=ResultadoClassificacao,
        )
        self.roteador.add_api_route(
            path="/classificacao/turma",
            endpoint=self._classificar_turma,
            methods=["POST"],
            response_model=ClassificacaoTurma,
        )

    @staticmethod
    async def _classificar(requisicao: RequisicaoClassificacao):
        try:
            return ClassificadorTransicao.classificar(
                requisicao.disciplinas,
                requisicao.nivel_ensino,
                requisicao.classe,
                requisicao.ids_obrigatorias,
                requisicao.frequencia,
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _classificar_turma(requisicao: RequisicaoClassificacaoTurma):
        return calcular_classificacao_turma(
            requisicao.avaliacoes,
            requisicao.nivel_ensino,
            requisicao.classe,
            requisicao.ids_obrigatorias,
        )
