"""Classificação de transição de ano (Ensino Primário e Secundário).

Responsabilidades:
- Aplicar a regra de frequência mínima antes de qualquer nota
- Arredondar as notas antes de compará-las com os limiares
- Aplicar as regras do primário e do secundário (7ª/8ª com exceção condicional)
- Gerar a observação padronizada e o motivo de retenção
"""

import re
from typing import Iterable, List, Optional, Sequence

from avaliacao.domain.classificacao import (
    FREQUENCIA_MINIMA,
    LIMIAR_PRIMARIO,
    LIMIAR_SECUNDARIO,
    PISO_SECUNDARIO,
    AvaliacaoAnualAluno,
    ClassificacaoAluno,
    ClassificacaoTurma,
    FalhaClassificacao,
    NivelEnsino,
    NotaDisciplina,
    ResultadoClassificacao,
    StatusTransicao,
)
from avaliacao.config.settings import Configuracoes
from avaliacao.domain.erros import ErroMotorAvaliacao
from avaliacao.util.arredondamento import arredondar_meio_acima
from avaliacao.util.logger import logger

OBSERVACAO_AGUARDANDO = "Aguardando notas para determinar transição."
CLASSES_COM_EXCECAO = (7, 8)
MAXIMO_DISCIPLINAS_CONDICIONAIS = 2

_NUMERO_CLASSE_ORDINAL = re.compile(r"(\d+)\s*[ªº]")
_NUMERO_CLASSE_INICIAL = re.compile(r"^\s*(\d+)")


def extrair_numero_classe(classe: Optional[str]) -> Optional[int]:
    """Extrai o número da classe ("8ª Classe" -> 8)."""
    if not classe:
        return None
    correspondencia = _NUMERO_CLASSE_ORDINAL.search(classe) or _NUMERO_CLASSE_INICIAL.search(classe)
    return int(correspondencia.group(1)) if correspondencia else None


def frequencia_suficiente(frequencia: Optional[float]) -> bool:
    """Frequência não informada não bloqueia a transição."""
    if frequencia is None:
        return True
    return frequencia >= FREQUENCIA_MINIMA


def disciplina_obrigatoria(
    disciplina: NotaDisciplina, ids_obrigatorias: Optional[Sequence[str]] = None
) -> bool:
    """Indica se a disciplina é obrigatória.

    Sem lista configurada, Língua Portuguesa e Matemática são as obrigatórias.
    """
    if not ids_obrigatorias:
        nome = disciplina.nome.lower().strip()
        return any(termo in nome for termo in ("português", "portugues", "matemática", "matematica"))
    return disciplina.id in ids_obrigatorias


def _texto_frequencia(frequencia: Optional[float]) -> str:
    return f"{frequencia:.2f}" if frequencia is not None else "N/A"


def gerar_observacao(
    status: StatusTransicao,
    limiar: int,
    disciplinas_em_risco: Optional[List[str]] = None,
    frequencia: Optional[float] = None,
) -> str:
    """Gera a observação padronizada registada na pauta.

    Parâmetros:
    - status (StatusTransicao): veredito
    - limiar (int): nota de referência citada (5, 7 ou 10)
    - disciplinas_em_risco (list[str] | None): disciplinas citadas
    - frequencia (float | None): frequência anual em percentagem

    Retorno:
    - str: frase padronizada
    """
    disciplinas_em_risco = disciplinas_em_risco or []

    if frequencia is not None and frequencia < FREQUENCIA_MINIMA:
        return (
            f"Não transitou por frequência insuficiente ({frequencia:.2f}%, inferior ao mínimo de 66,67%)."
        )

    if status == StatusTransicao.TRANSITA:
        return (
            f"Transitou por ter obtido classificação igual ou superior a {limiar} valores "
            f"em todas as disciplinas e frequência de {_texto_frequencia(frequencia)}%."
        )

    if status == StatusTransicao.CONDICIONAL:
        return (
            f"Transitou condicionalmente com {len(disciplinas_em_risco)} disciplina(s) entre 7 e 9 valores: "
            f"{', '.join(disciplinas_em_risco)}. Deve realizar Exame Extraordinário conforme calendário oficial."
        )

    if status == StatusTransicao.NAO_TRANSITA:
        if disciplinas_em_risco:
            return (
                f"Não transitou por ter obtido classificação inferior a {limiar} valores em "
                f"{len(disciplinas_em_risco)} disciplina(s): {', '.join(disciplinas_em_risco)}."
            )
        return "Não transitou por não atingir os critérios mínimos de aprovação."

    return OBSERVACAO_AGUARDANDO


class ClassificadorTransicao:
    """Classificador de transição de ano do sistema de ensino angolano.

    Responsabilidades:
    - Escolher o conjunto de regras pelo nível de ensino
    - Produzir um ResultadoClassificacao novo a cada chamada
    """

    @staticmethod
    def classificar(
        disciplinas: List[NotaDisciplina],
        nivel_ensino: Optional[str] = None,
        classe: Optional[str] = None,
        ids_obrigatorias: Optional[Sequence[str]] = None,
        frequencia: Optional[float] = None,
    ) -> ResultadoClassificacao:
        """Classifica um aluno a partir das notas finais das disciplinas.

        Parâmetros:
        - disciplinas (list[NotaDisciplina]): notas finais (MF/MFD) do ano
        - nivel_ensino (str | None): ex.: "Ensino Primário", "Ensino Secundário I Ciclo"
        - classe (str | None): ex.: "7ª Classe"
        - ids_obrigatorias (Sequence[str] | None): disciplinas obrigatórias da turma
        - frequencia (float | None): frequência anual (0-100)

        Retorno:
        - ResultadoClassificacao: veredito e fundamentação
        """
        if not disciplinas:
            return ClassificadorTransicao._aguardando_notas()

        if not frequencia_suficiente(frequencia):
            return ClassificadorTransicao._retido_por_frequencia(frequencia)

        if NivelEnsino.a_partir_de(nivel_ensino) == NivelEnsino.PRIMARIO:
            return ClassificadorTransicao._classificar_primario(disciplinas, frequencia)
        return ClassificadorTransicao._classificar_secundario(disciplinas, classe, ids_obrigatorias, frequencia)

    @staticmethod
    def _aguardando_notas() -> ResultadoClassificacao:
        return ResultadoClassificacao(
            status=StatusTransicao.AGUARDANDO_NOTAS,
            motivos=["Nenhuma nota disponível"],
            acoes_recomendadas=["Aguardar lançamento de notas"],
            observacao_padronizada=OBSERVACAO_AGUARDANDO,
        )

    @staticmethod
    def _retido_por_frequencia(frequencia: float) -> ResultadoClassificacao:
        texto = _texto_frequencia(frequencia)
        return ResultadoClassificacao(
            status=StatusTransicao.NAO_TRANSITA,
            motivos=[f"Frequência insuficiente ({texto}%)"],
            acoes_recomendadas=["Melhorar assiduidade"],
            observacao_padronizada=gerar_observacao(StatusTransicao.NAO_TRANSITA, LIMIAR_SECUNDARIO, [], frequencia),
            motivo_retencao=f"Frequência insuficiente ({texto}%, inferior ao mínimo de 66,67%)",
        )

    @staticmethod
    def _classificar_primario(
        disciplinas: List[NotaDisciplina], frequencia: Optional[float]
    ) -> ResultadoClassificacao:
        """Primário: transita com todas as notas arredondadas >= 5."""
        abaixo_limiar = [
            disciplina.nome for disciplina in disciplinas if arredondar_meio_acima(disciplina.nota) < LIMIAR_PRIMARIO
        ]

        if not abaixo_limiar:
            return ResultadoClassificacao(
                status=StatusTransicao.TRANSITA,
                motivos=["Todas as disciplinas com nota >= 5"],
                observacao_padronizada=gerar_observacao(StatusTransicao.TRANSITA, LIMIAR_PRIMARIO, [], frequencia),
            )

        return ResultadoClassificacao(
            status=StatusTransicao.NAO_TRANSITA,
            motivos=[f"{len(abaixo_limiar)} disciplina(s) com nota < 5"],
            disciplinas_em_risco=abaixo_limiar,
            acoes_recomendadas=["Reforço nas disciplinas em risco", "Acompanhamento pedagógico"],
            observacao_padronizada=gerar_observacao(
                StatusTransicao.NAO_TRANSITA, LIMIAR_PRIMARIO, abaixo_limiar, frequencia
            ),
            motivo_retencao=(
                f"{len(abaixo_limiar)} disciplina(s) com nota inferior a 5 valores: {', '.join(abaixo_limiar)}"
            ),
        )

    @staticmethod
    def _classificar_secundario(
        disciplinas: List[NotaDisciplina],
        classe: Optional[str],
        ids_obrigatorias: Optional[Sequence[str]],
        frequencia: Optional[float],
    ) -> ResultadoClassificacao:
        """Secundário: piso 7 sem exceções; 7ª e 8ª admitem até 2 disciplinas entre 7 e 9."""
        abaixo_piso: List[str] = []
        entre_7_e_9: List[NotaDisciplina] = []

        for disciplina in disciplinas:
            nota = arredondar_meio_acima(disciplina.nota)
            if nota < PISO_SECUNDARIO:
                abaixo_piso.append(disciplina.nome)
            elif nota < LIMIAR_SECUNDARIO:
                entre_7_e_9.append(disciplina)

        if abaixo_piso:
            return ResultadoClassificacao(
                status=StatusTransicao.NAO_TRANSITA,
                motivos=[f"{len(abaixo_piso)} disciplina(s) com nota < 7"],
                disciplinas_em_risco=abaixo_piso,
                acoes_recomendadas=["Reforço urgente nas disciplinas em risco", "Acompanhamento pedagógico intensivo"],
                observacao_padronizada=gerar_observacao(
                    StatusTransicao.NAO_TRANSITA, PISO_SECUNDARIO, abaixo_piso, frequencia
                ),
                motivo_retencao=(
                    f"{len(abaixo_piso)} disciplina(s) com nota inferior a 7 valores: {', '.join(abaixo_piso)}"
                ),
            )

        nomes_em_risco = [disciplina.nome for disciplina in entre_7_e_9]
        numero_classe = extrair_numero_classe(classe)

        if numero_classe in CLASSES_COM_EXCECAO:
            return ClassificadorTransicao._aplicar_excecao_7_8(
                entre_7_e_9, nomes_em_risco, ids_obrigatorias, frequencia
            )

        if not nomes_em_risco:
            return ClassificadorTransicao._transita_secundario(frequencia)

        if numero_classe == 9:
            return ResultadoClassificacao(
                status=StatusTransicao.NAO_TRANSITA,
                motivos=["9ª Classe requer todas as disciplinas >= 10"],
                disciplinas_em_risco=nomes_em_risco,
                acoes_recomendadas=["Reforço nas disciplinas abaixo de 10", "Preparação para exames"],
                observacao_padronizada=gerar_observacao(
                    StatusTransicao.NAO_TRANSITA, LIMIAR_SECUNDARIO, nomes_em_risco, frequencia
                ),
                motivo_retencao=(
                    "9ª Classe requer todas as disciplinas com nota >= 10 valores. "
                    f"Disciplinas em risco: {', '.join(nomes_em_risco)}"
                ),
            )

        return ResultadoClassificacao(
            status=StatusTransicao.NAO_TRANSITA,
            motivos=["Regra geral: todas as disciplinas devem ter >= 10"],
            disciplinas_em_risco=nomes_em_risco,
            acoes_recomendadas=["Reforço nas disciplinas abaixo de 10"],
            observacao_padronizada=gerar_observacao(
                StatusTransicao.NAO_TRANSITA, LIMIAR_SECUNDARIO, nomes_em_risco, frequencia
            ),
            motivo_retencao=f"Disciplinas com nota inferior a 10 valores: {', '.join(nomes_em_risco)}",
        )

    @staticmethod
    def _transita_secundario(frequencia: Optional[float]) -> ResultadoClassificacao:
        return ResultadoClassificacao(
            status=StatusTransicao.TRANSITA,
            motivos=["Todas as disciplinas >= 10"],
            observacao_padronizada=gerar_observacao(StatusTransicao.TRANSITA, LIMIAR_SECUNDARIO, [], frequencia),
        )

    @staticmethod
    def _aplicar_excecao_7_8(
        entre_7_e_9: List[NotaDisciplina],
        nomes_em_risco: List[str],
        ids_obrigatorias: Optional[Sequence[str]],
        frequencia: Optional[float],
    ) -> ResultadoClassificacao:
        if not entre_7_e_9:
            return ClassificadorTransicao._transita_secundario(frequencia)

        if len(entre_7_e_9) > MAXIMO_DISCIPLINAS_CONDICIONAIS:
            return ResultadoClassificacao(
                status=StatusTransicao.NAO_TRANSITA,
                motivos=[f"Mais de 2 disciplinas entre 7-9 ({len(entre_7_e_9)} encontradas)"],
                disciplinas_em_risco=nomes_em_risco,
                acoes_recomendadas=["Reforço nas disciplinas entre 7-9"],
                observacao_padronizada=gerar_observacao(
                    StatusTransicao.NAO_TRANSITA, LIMIAR_SECUNDARIO, nomes_em_risco, frequencia
                ),
                motivo_retencao=(
                    f"Mais de 2 disciplinas com notas entre 7-9 valores ({len(entre_7_e_9)} encontradas): "
                    f"{', '.join(nomes_em_risco)}"
                ),
            )

        obrigatorias = [disciplina for disciplina in entre_7_e_9 if disciplina_obrigatoria(disciplina, ids_obrigatorias)]
        if len(entre_7_e_9) == 2 and len(obrigatorias) == 2:
            return ResultadoClassificacao(
                status=StatusTransicao.NAO_TRANSITA,
                motivos=["Não permitido ter 2 disciplinas obrigatórias simultaneamente entre 7-9"],
                disciplinas_em_risco=nomes_em_risco,
                acoes_recomendadas=["Reforço urgente nas disciplinas obrigatórias"],
                observacao_padronizada=(
                    "Não transitou por ter obtido classificação inferior a 10 valores simultaneamente "
                    "em Língua Portuguesa e Matemática."
                ),
                motivo_retencao=(
                    "Não permitido ter Língua Portuguesa e Matemática simultaneamente com notas entre 7-9 valores"
                ),
            )

        return ResultadoClassificacao(
            status=StatusTransicao.CONDICIONAL,
            motivos=[f"Permitido até 2 disciplinas entre 7-9 ({len(entre_7_e_9)} encontrada(s))"],
            disciplinas_em_risco=nomes_em_risco,
            acoes_recomendadas=[
                "Reforço nas disciplinas entre 7-9 para melhorar desempenho",
                "Preparação para Exame Extraordinário",
            ],
            observacao_padronizada=gerar_observacao(
                StatusTransicao.CONDICIONAL, LIMIAR_SECUNDARIO, nomes_em_risco, frequencia
            ),
            matricula_condicional=True,
        )


def classificar_aluno(
    disciplinas: List[NotaDisciplina],
    nivel_ensino: Optional[str] = None,
    classe: Optional[str] = None,
    ids_obrigatorias: Optional[Sequence[str]] = None,
    frequencia: Optional[float] = None,
) -> ResultadoClassificacao:
    """Atalho funcional para ClassificadorTransicao.classificar."""
    return ClassificadorTransicao.classificar(disciplinas, nivel_ensino, classe, ids_obrigatorias, frequencia)


def calcular_media_geral(disciplinas: Sequence[NotaDisciplina]) -> float:
    """Média simples das notas finais, com 2 casas; 0 quando não há notas."""
    if not disciplinas:
        return 0.0
    media = sum(disciplina.nota for disciplina in disciplinas) / len(disciplinas)
    return arredondar_meio_acima(media, Configuracoes.CASAS_DECIMAIS)


def calcular_classificacao_turma(
    avaliacoes: Iterable[AvaliacaoAnualAluno],
    nivel_ensino: Optional[str] = None,
    classe: Optional[str] = None,
    ids_obrigatorias: Optional[Sequence[str]] = None,
) -> ClassificacaoTurma:
    """Classifica todos os alunos de uma turma.

    A falha de um aluno é registrada em `erros` e não interrompe os demais.

    Parâmetros:
    - avaliacoes (Iterable[AvaliacaoAnualAluno]): notas finais por aluno
    - nivel_ensino (str | None): nível de ensino da turma
    - classe (str | None): classe da turma
    - ids_obrigatorias (Sequence[str] | None): disciplinas obrigatórias

    Retorno:
    - ClassificacaoTurma: vereditos e falhas por aluno
    """
    turma = ClassificacaoTurma()
    for avaliacao in avaliacoes:
        try:
            resultado = ClassificadorTransicao.classificar(
                avaliacao.disciplinas, nivel_ensino, classe, ids_obrigatorias, avaliacao.frequencia
            )
            media_geral = calcular_media_geral(avaliacao.disciplinas)
        except (ErroMotorAvaliacao, ValueError, TypeError) as erro:
            logger.warning(f"Falha ao classificar o aluno {avaliacao.aluno_id}: {erro}")
            turma.erros.append(FalhaClassificacao(aluno_id=avaliacao.aluno_id, erro=str(erro)))
            continue

        turma.resultados.append(
            ClassificacaoAluno(
                aluno_id=avaliacao.aluno_id,
                nome=avaliacao.nome,
                classificacao=resultado,
                media_geral=media_geral,
            )
        )
    return turma
