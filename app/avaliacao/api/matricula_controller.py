"""Controlador de matrículas.

Responsabilidades:
- Expor o ciclo de vida da matrícula (gerar, classificar, exame, confirmar, cancelar)
- Resolver dependência do serviço de matrículas
- Traduzir erros em respostas HTTP (404, 409, 400)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from avaliacao.api.erros_http import ERROS_TRADUZIVEIS, traduzir_erro
from avaliacao.api.esquemas import (
    RequisicaoClassificacao,
    RequisicaoConfirmarLote,
    RequisicaoConfirmarMatricula,
    RequisicaoExame,
    RequisicaoGerarMatriculas,
)
from avaliacao.application.matricula_service import ServicoMatricula, obter_servico_matricula_runtime
from avaliacao.domain.matricula import Matricula, RelatorioLote, ResumoMatriculas


def obter_servico_matricula() -> ServicoMatricula:
    """Dependência para obter o serviço de matrículas.

    Retorno:
    - ServicoMatricula: instância compartilhada pelo processo
    """
    return obter_servico_matricula_runtime()


class ControladorMatriculas:
    """Controlador de matrículas.

    Responsabilidades:
    - Registrar rotas de consulta e de transição de estado
    """

    def __init__(self):
        """Inicializa o controlador.

        Responsabilidades:
        - Instanciar o roteador
        - Registrar as rotas (rotas fixas antes de /matriculas/{matricula_id})
        """
        self.roteador = APIRouter()
        self._registrar_rotas()

    def _registrar_rotas(self):
        self.roteador.add_api_route(
            path="/matriculas/gerar",
            endpoint=self._gerar,
            methods=["POST"],
            response_model=List[Matricula],
            summary="Gera matrículas pendentes para os alunos ativos da turma",
        )
        self.roteador.add_api_route(
            path="/matriculas/confirmar-lote",
            endpoint=self._confirmar_lote,
            methods=["POST"],
            response_model=RelatorioLote,
        )
        self.roteador.add_api_route(
            path="/matriculas",
            endpoint=self._listar,
            methods=["GET"],
            response_model=List[Matricula],
        )
        self.roteador.add_api_route(
            path="/matriculas/resumo",
            endpoint=self._resumo,
            methods=["GET"],
            response_model=ResumoMatriculas,
        )
        self.roteador.add_api_route(
            path="/matriculas/{matricula_id}",
            endpoint=self._obter,
            methods=["GET"],
            response_model=Matricula,
        )
        self.roteador.add_api_route(
            path="/matriculas/{matricula_id}/classificar",
            endpoint=self._classificar,
            methods=["POST"],
            response_model=Matricula,
        )
        self.roteador.add_api_route(
            path="/matriculas/{matricula_id}/confirmar",
            endpoint=self._confirmar,
            methods=["POST"],
            response_model=Matricula,
        )
        self.roteador.add_api_route(
            path="/matriculas/{matricula_id}/exame",
            endpoint=self._registrar_exame,
            methods=["POST"],
            response_model=Matricula,
        )
        self.roteador.add_api_route(
            path="/matriculas/{matricula_id}/cancelar",
            endpoint=self._cancelar,
            methods=["POST"],
            response_model=Matricula,
        )

    @staticmethod
    async def _gerar(
        requisicao: RequisicaoGerarMatriculas, servico: ServicoMatricula = Depends(obter_servico_matricula)
    ):
        try:
            return servico.gerar_matriculas_pendentes(
                requisicao.turma, requisicao.alunos, requisicao.ano_lectivo_destino
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _listar(
        escola_id: Optional[str] = None,
        ano_lectivo: Optional[str] = None,
        servico: ServicoMatricula = Depends(obter_servico_matricula),
    ):
        return servico.listar_matriculas(escola_id, ano_lectivo)

    @staticmethod
    async def _resumo(
        escola_id: Optional[str] = None,
        ano_lectivo: Optional[str] = None,
        servico: ServicoMatricula = Depends(obter_servico_matricula),
    ):
        return servico.carregar_resumo_matriculas(escola_id, ano_lectivo)

    @staticmethod
    async def _obter(matricula_id: str, servico: ServicoMatricula = Depends(obter_servico_matricula)):
        try:
            return servico.obter_matricula(matricula_id)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _classificar(
        matricula_id: str,
        requisicao: RequisicaoClassificacao,
        servico: ServicoMatricula = Depends(obter_servico_matricula),
    ):
        """Classifica o aluno e grava o veredito na matrícula.

        Exceções:
        - HTTPException: 404 matrícula inexistente, 409 estado não classificável
        """
        try:
            return servico.classificar_matricula(
                matricula_id,
                requisicao.disciplinas,
                requisicao.nivel_ensino,
                requisicao.classe,
                requisicao.ids_obrigatorias,
                requisicao.frequencia,
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _confirmar(
        matricula_id: str,
        requisicao: RequisicaoConfirmarMatricula,
        servico: ServicoMatricula = Depends(obter_servico_matricula),
    ):
        """Confirma a matrícula na turma de destino.

        Exceções:
        - HTTPException: 400 sem turma de destino, 404 inexistente, 409 já processada
        """
        try:
            return servico.confirmar_matricula(
                matricula_id, requisicao.turma_destino_id, requisicao.classe_destino, requisicao.confirmado_por
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _registrar_exame(
        matricula_id: str,
        requisicao: RequisicaoExame,
        servico: ServicoMatricula = Depends(obter_servico_matricula),
    ):
        try:
            return servico.registrar_resultado_exame(
                matricula_id, requisicao.resultado, requisicao.nota, requisicao.data_exame, requisicao.observacao
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _cancelar(matricula_id: str, servico: ServicoMatricula = Depends(obter_servico_matricula)):
        try:
            return servico.cancelar_matricula(matricula_id)
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    async def _confirmar_lote(
        requisicao: RequisicaoConfirmarLote, servico: ServicoMatricula = Depends(obter_servico_matricula)
    ):
        try:
            return servico.confirmar_matriculas_em_lote(
                requisicao.ids, requisicao.turma_destino_id, requisicao.confirmado_por
            )
        except ERROS_TRADUZIVEIS as erro:
            raise traduzir_erro(erro)
