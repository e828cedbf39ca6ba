"""Serviço de matrículas (máquina de estados).

Responsabilidades:
- Gerar matrículas pendentes no fim do ano lectivo
- Gravar o veredito do classificador e a classe de destino
- Confirmar, cancelar e registrar exame extraordinário
- Rejeitar transições inválidas sem alterar o registro
"""

import re
from datetime import date, datetime
from threading import Lock
from typing import Callable, Iterable, List, Optional, Sequence

import pandas as pd

from avaliacao.application.agregador_notas import validar_valor_nota
from avaliacao.application.classificador_transicao import (
    ClassificadorTransicao,
    calcular_media_geral,
    extrair_numero_classe,
)
from avaliacao.config.settings import Configuracoes
from avaliacao.domain.classificacao import (
    AvaliacaoAnualAluno,
    NotaDisciplina,
    ResultadoClassificacao,
    StatusTransicao,
)
from avaliacao.domain.erros import ErroMotorAvaliacao, ErroTransicaoEstado, ErroValidacao
from avaliacao.domain.matricula import (
    AlunoMatriculavel,
    EstadoMatricula,
    FalhaLote,
    Matricula,
    RelatorioLote,
    ResultadoExame,
    ResumoMatriculas,
    TurmaOrigem,
)
from avaliacao.infrastructure.data.matricula_repository import (
    RepositorioMatriculas,
    criar_repositorio_matriculas,
)
from avaliacao.util.logger import logger

ESTADOS_CLASSIFICAVEIS = (EstadoMatricula.PENDENTE, EstadoMatricula.AGUARDANDO_EXAME)
ESTADOS_CONFIRMAVEIS = (EstadoMatricula.PENDENTE, EstadoMatricula.EXAME_REALIZADO)

_CLASSE_NA_TURMA = re.compile(r"(\d+[ªº]\s*Classe)", re.IGNORECASE)
_ANO = re.compile(r"(\d{4})")


def determinar_proxima_classe(classe_atual: str) -> str:
    """Próxima classe ("7ª Classe" -> "8ª Classe"); a 12ª Classe não avança."""
    numero = extrair_numero_classe(classe_atual)
    if numero is None:
        return classe_atual
    if numero + 1 > Configuracoes.CLASSE_MAXIMA:
        return classe_atual
    return f"{numero + 1}ª Classe"


def extrair_classe(nome_turma: Optional[str]) -> Optional[str]:
    """Classe a partir do nome da turma ("10ª Classe A" -> "10ª Classe")."""
    if not nome_turma:
        return None
    correspondencia = _CLASSE_NA_TURMA.search(nome_turma)
    return correspondencia.group(1) if correspondencia else None


def calcular_proximo_ano_lectivo(ano_atual: str) -> str:
    """Ano lectivo seguinte ("2025" ou "2025/2026" -> "2026")."""
    correspondencia = _ANO.search(ano_atual or "")
    if not correspondencia:
        return ano_atual
    return str(int(correspondencia.group(1)) + 1)

class ServicoMatricula:
    """Máquina de estados das matrículas anuais.

    Estados: pendente -> (aguardando_exame -> exame_realizado) -> confirmada,
    e pendente -> cancelada. Toda transição é uma leitura seguida de escrita
    condicionada à versão lida, de modo que duas confirmações simultâneas
    do mesmo registro não podem ambas ter sucesso.
    """

    def __init__(self, repositorio: RepositorioMatriculas):
        """Inicializa o serviço com o repositório injetado.

        Parâmetros:
        - repositorio (RepositorioMatriculas): armazenamento das matrículas
        """
        self.repositorio = repositorio

    def gerar_matriculas_pendentes(
        self,
        turma: TurmaOrigem,
        alunos: Iterable[AlunoMatriculavel],
        ano_lectivo_destino: Optional[str] = None,
    ) -> List[Matricula]:
        """Cria uma matrícula pendente para cada aluno ativo da turma.

        Alunos que já possuem matrícula não cancelada para o mesmo ano de
        origem são ignorados, portanto chamar de novo não duplica registros.

        Parâmetros:
        - turma (TurmaOrigem): turma de origem
        - alunos (Iterable[AlunoMatriculavel]): alunos da turma
        - ano_lectivo_destino (str | None): padrão é o ano seguinte ao da turma

        Retorno:
        - list[Matricula]: matrículas criadas nesta chamada
        """
        destino = ano_lectivo_destino or calcular_proximo_ano_lectivo(turma.ano_lectivo)
        classe_origem = extrair_classe(turma.nome)
        criadas = []

        for aluno in alunos:
            if not aluno.ativo:
                continue
            if self.repositorio.buscar_ativa(aluno.id, turma.ano_lectivo) is not None:
                continue

            matricula = Matricula(
                aluno_id=aluno.id,
                escola_id=turma.escola_id,
                turma_origem_id=turma.id,
                ano_lectivo_origem=turma.ano_lectivo,
                ano_lectivo_destino=destino,
                frequencia_anual=aluno.frequencia_anual,
                classe_origem=classe_origem,
            )
            criadas.append(self.repositorio.inserir(matricula))

        logger.info(f"{len(criadas)} matrícula(s) pendente(s) gerada(s) para a turma {turma.id}")
        return criadas

    def obter_matricula(self, matricula_id: str) -> Matricula:
        return self.repositorio.obter(matricula_id)

    def listar_matriculas(
        self, escola_id: Optional[str] = None, ano_lectivo_origem: Optional[str] = None
    ) -> List[Matricula]:
        return self.repositorio.listar(escola_id, ano_lectivo_origem)

    def _transicionar(
        self,
        matricula_id: str,
        estados_permitidos: Sequence[EstadoMatricula],
        operacao: str,
        aplicar: Callable[[Matricula], None],
    ) -> Matricula:
        """Aplica uma transição se o estado atual permitir.

        Exceções:
        - ErroMatriculaNaoEncontrada: id desconhecido
        - ErroTransicaoEstado: estado atual não admite a operação
        - ErroConcorrencia: o registro mudou entre a leitura e a escrita
        """
        atual = self.repositorio.obter(matricula_id)
        if atual.estado_matricula not in estados_permitidos:
            permitidos = ", ".join(estado.value for estado in estados_permitidos)
            logger.warning(
                f"Transição '{operacao}' rejeitada para matrícula {matricula_id} "
                f"no estado {atual.estado_matricula.value}"
            )
            raise ErroTransicaoEstado(
                f"Não é possível {operacao} a matrícula {matricula_id}: estado atual "
                f"'{atual.estado_matricula.value}', permitido(s): {permitidos}"
            )

        alterada = atual.model_copy(deep=True)
        aplicar(alterada)
        gravada = self.repositorio.atualizar(alterada, versao_esperada=atual.versao)
        logger.info(
            f"Matrícula {matricula_id}: {operacao} "
            f"({atual.estado_matricula.value} -> {gravada.estado_matricula.value})"
        )
        return gravada

    def classificar_matricula(
        self,
        matricula_id: str,
        disciplinas: List[NotaDisciplina],
        nivel_ensino: Optional[str] = None,
        classe: Optional[str] = None,
        ids_obrigatorias: Optional[Sequence[str]] = None,
        frequencia: Optional[float] = None,
    ) -> Matricula:
        """Classifica o aluno e grava o veredito na matrícula.

        Transita/Condicional apontam a classe seguinte; Não Transita mantém a
        classe de origem. Condicional passa a aguardar exame extraordinário.

        Parâmetros:
        - matricula_id (str): matrícula a atualizar
        - disciplinas (list[NotaDisciplina]): notas finais do ano
        - nivel_ensino (str | None): nível de ensino da turma
        - classe (str | None): padrão é a classe de origem da matrícula
        - ids_obrigatorias (Sequence[str] | None): disciplinas obrigatórias
        - frequencia (float | None): padrão é a frequência registrada

        Retorno:
        - Matricula: registro atualizado
        """

        def aplicar(matricula: Matricula) -> None:
            classe_origem = classe or matricula.classe_origem
            frequencia_anual = frequencia if frequencia is not None else matricula.frequencia_anual
            resultado = ClassificadorTransicao.classificar(
                disciplinas, nivel_ensino, classe_origem, ids_obrigatorias, frequencia_anual
            )
            self._aplicar_veredito(matricula, resultado, classe_origem)
            matricula.media_geral = calcular_media_geral(disciplinas)
            matricula.frequencia_anual = frequencia_anual

        return self._transicionar(matricula_id, ESTADOS_CLASSIFICAVEIS, "classificar", aplicar)

    @staticmethod
    def _aplicar_veredito(
        matricula: Matricula, resultado: ResultadoClassificacao, classe_origem: Optional[str]
    ) -> None:
        matricula.status_transicao = resultado.status
        matricula.disciplinas_em_risco = list(resultado.disciplinas_em_risco)
        matricula.observacao_padronizada = resultado.observacao_padronizada
        matricula.motivo_retencao = resultado.motivo_retencao
        matricula.matricula_condicional = resultado.matricula_condicional
        matricula.classe_origem = classe_origem

        if resultado.status in (StatusTransicao.TRANSITA, StatusTransicao.CONDICIONAL):
            matricula.classe_destino = determinar_proxima_classe(classe_origem) if classe_origem else None
        elif resultado.status == StatusTransicao.NAO_TRANSITA:
            matricula.classe_destino = classe_origem
        else:
            matricula.classe_destino = None

        if resultado.status == StatusTransicao.CONDICIONAL:
            matricula.estado_matricula = EstadoMatricula.AGUARDANDO_EXAME
        else:
            matricula.estado_matricula = EstadoMatricula.PENDENTE

    def confirmar_matricula(
        self,
        matricula_id: str,
        turma_destino_id: str,
        classe_destino: Optional[str] = None,
        confirmado_por: Optional[str] = None,
    ) -> Matricula:
        """Confirma a matrícula na turma de destino (transitados ou repetentes).

        Exceções:
        - ErroValidacao: turma de destino não informada
        - ErroTransicaoEstado: matrícula já processada ou aguardando exame
        """
        if not turma_destino_id or not str(turma_destino_id).strip():
            raise ErroValidacao("Turma de destino é obrigatória para confirmar a matrícula")

        def aplicar(matricula: Matricula) -> None:
            matricula.turma_destino_id = turma_destino_id
            if classe_destino:
                matricula.classe_destino = classe_destino
            matricula.estado_matricula = EstadoMatricula.CONFIRMADA
            matricula.confirmado_por = confirmado_por
            matricula.confirmado_em = datetime.now()

        return self._transicionar(matricula_id, ESTADOS_CONFIRMAVEIS, "confirmar", aplicar)

    def confirmar_repetencia(
        self, matricula_id: str, turma_destino_id: str, confirmado_por: Optional[str] = None
    ) -> Matricula:
        """Confirma o aluno numa turma da mesma classe de origem."""
        matricula = self.repositorio.obter(matricula_id)
        return self.confirmar_matricula(
            matricula_id, turma_destino_id, classe_destino=matricula.classe_origem, confirmado_por=confirmado_por
        )

    def registrar_resultado_exame(
        self,
        matricula_id: str,
        resultado: ResultadoExame,
        nota: float,
        data_exame: Optional[date] = None,
        observacao: Optional[str] = None,
    ) -> Matricula:
        """Registra o exame extraordinário de um aluno condicional.

        Aprovação aponta a classe seguinte; reprovação mantém a classe de
        origem. O registro passa a 'exame_realizado' e um segundo registro é
        rejeitado.

        Exceções:
        - ErroValidacao: nota fora da escala
        - ErroTransicaoEstado: matrícula não está aguardando exame
        """
        resultado = ResultadoExame(resultado)
        validacao = validar_valor_nota(nota)
        if not validacao.valida:
            raise ErroValidacao(f"Nota de exame inválida: {validacao.erro}")

        def aplicar(matricula: Matricula) -> None:
            matricula.resultado_exame = resultado
            matricula.nota_exame = nota
            matricula.data_exame = data_exame or date.today()
            matricula.observacao_exame = observacao
            matricula.estado_matricula = EstadoMatricula.EXAME_REALIZADO
            if resultado == ResultadoExame.APROVADO:
                matricula.status_transicao = StatusTransicao.TRANSITA
                if matricula.classe_origem:
                    matricula.classe_destino = determinar_proxima_classe(matricula.classe_origem)
            else:
                matricula.status_transicao = StatusTransicao.NAO_TRANSITA
                matricula.classe_destino = matricula.classe_origem

        return self._transicionar(
            matricula_id, (EstadoMatricula.AGUARDANDO_EXAME,), "registrar exame para", aplicar
        )

    def cancelar_matricula(self, matricula_id: str) -> Matricula:
        """Cancela uma matrícula ainda pendente."""

        def aplicar(matricula: Matricula) -> None:
            matricula.estado_matricula = EstadoMatricula.CANCELADA

        return self._transicionar(matricula_id, (EstadoMatricula.PENDENTE,), "cancelar", aplicar)

    def confirmar_matriculas_em_lote(
        self, matricula_ids: Iterable[str], turma_destino_id: str, confirmado_por: Optional[str] = None
    ) -> RelatorioLote:
        """Confirma várias matrículas na mesma turma de destino.

        Cada id é tentado de forma independente; falhas são relatadas por id.
        """
        relatorio = RelatorioLote()
        for matricula_id in matricula_ids:
            try:
                self.confirmar_matricula(matricula_id, turma_destino_id, confirmado_por=confirmado_por)
            except (ErroMotorAvaliacao, ValueError) as erro:
                logger.warning(f"Falha ao confirmar matrícula {matricula_id} em lote: {erro}")
                relatorio.erros.append(FalhaLote(id=matricula_id, erro=str(erro)))
                continue
            relatorio.sucesso += 1
            relatorio.confirmadas.append(matricula_id)

        logger.info(f"Confirmação em lote: {relatorio.sucesso} sucesso(s), {len(relatorio.erros)} falha(s)")
        return relatorio

    def classificar_matriculas_em_lote(
        self,
        avaliacoes: Iterable[AvaliacaoAnualAluno],
        nivel_ensino: Optional[str] = None,
        classe: Optional[str] = None,
        ids_obrigatorias: Optional[Sequence[str]] = None,
    ) -> RelatorioLote:
        """Classifica as matrículas de uma turma; a falha de um aluno não interrompe os demais."""
        relatorio = RelatorioLote()
        for avaliacao in avaliacoes:
            identificador = avaliacao.matricula_id or avaliacao.aluno_id
            try:
                if not avaliacao.matricula_id:
                    raise ErroValidacao(f"Aluno {avaliacao.aluno_id} sem matrícula associada")
                self.classificar_matricula(
                    avaliacao.matricula_id,
                    avaliacao.disciplinas,
                    nivel_ensino,
                    classe,
                    ids_obrigatorias,
                    avaliacao.frequencia,
                )
            except (ErroMotorAvaliacao, ValueError) as erro:
                logger.warning(f"Falha ao classificar {identificador}: {erro}")
                relatorio.erros.append(FalhaLote(id=identificador, erro=str(erro)))
                continue
            relatorio.sucesso += 1
            relatorio.confirmadas.append(identificador)
        return relatorio

    def carregar_resumo_matriculas(self, escola_id: Optional[str], ano_lectivo_origem: Optional[str]) -> ResumoMatriculas:
        """Contagens por veredito e por estado de uma escola/ano lectivo."""
        matriculas = self.repositorio.listar(escola_id, ano_lectivo_origem)
        if not matriculas:
            return ResumoMatriculas()

        dados = pd.DataFrame(
            [
                {"status": m.status_transicao.value, "estado": m.estado_matricula.value}
                for m in matriculas
            ]
        )
        por_status = dados["status"].value_counts().to_dict()
        por_estado = {str(chave): int(valor) for chave, valor in dados["estado"].value_counts().items()}

        return ResumoMatriculas(
            total=len(dados),
            transitados=int(por_status.get(StatusTransicao.TRANSITA.value, 0)),
            nao_transitados=int(por_status.get(StatusTransicao.NAO_TRANSITA.value, 0)),
            condicionais=int(por_status.get(StatusTransicao.CONDICIONAL.value, 0)),
            aguardando_notas=int(por_status.get(StatusTransicao.AGUARDANDO_NOTAS.value, 0)),
            pendentes=por_estado.get(EstadoMatricula.PENDENTE.value, 0),
            confirmadas=por_estado.get(EstadoMatricula.CONFIRMADA.value, 0),
            aguardando_exame=por_estado.get(EstadoMatricula.AGUARDANDO_EXAME.value, 0),
            exame_realizado=por_estado.get(EstadoMatricula.EXAME_REALIZADO.value, 0),
            canceladas=por_estado.get(EstadoMatricula.CANCELADA.value, 0),
            por_estado=por_estado,
        )


_servico_padrao: Optional[ServicoMatricula] = None
_lock_servico = Lock()


def obter_servico_matricula_runtime() -> ServicoMatricula:
    """Serviço único do processo, sobre o repositório configurado."""
    global _servico_padrao
    if _servico_padrao is None:
        with _lock_servico:
            if _servico_padrao is None:
                _servico_padrao = ServicoMatricula(criar_repositorio_matriculas())
    return _servico_padrao
