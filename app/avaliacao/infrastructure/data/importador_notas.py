"""Importação de pautas de notas finais em CSV.

Responsabilidades:
- Ler CSV separado por ';' ou ','
- Normalizar nomes de colunas
- Validar o contrato da pauta
- Agrupar as notas por aluno e relatar erros por linha
"""

import re
import unicodedata
from typing import Dict, Iterable, List, Optional

import pandas as pd
from pydantic import BaseModel, Field

from avaliacao.application.agregador_notas import validar_valor_nota
from avaliacao.config.settings import Configuracoes
from avaliacao.domain.classificacao import AvaliacaoAnualAluno, NotaDisciplina
from avaliacao.infrastructure.data.contrato_dados import CONTRATO_PAUTA
from avaliacao.util.logger import logger

SINONIMOS_COLUNAS = {
    "PROCESSO": "NUMERO_PROCESSO",
    "N_PROCESSO": "NUMERO_PROCESSO",
    "NO_PROCESSO": "NUMERO_PROCESSO",
    "ALUNO_ID": "NUMERO_PROCESSO",
    "NOME_COMPLETO": "NOME",
    "ALUNO": "NOME",
    "CODIGO_DISCIPLINA": "DISCIPLINA_ID",
    "MF": "NOTA",
    "MFD": "NOTA",
    "NOTA_FINAL": "NOTA",
    "FREQUENCIA_ANUAL": "FREQUENCIA",
}


class ErroLinha(BaseModel):
    """Linha da pauta rejeitada (numeração a partir de 1, sem o cabeçalho)."""

    linha: int
    erro: str


class ResultadoImportacao(BaseModel):
    """Notas agrupadas por aluno e rejeições por linha."""

    avaliacoes: List[AvaliacaoAnualAluno] = Field(default_factory=list)
    erros: List[ErroLinha] = Field(default_factory=list)
    linhas_importadas: int = 0
    linhas_sem_nota: int = 0


class ImportadorNotas:
    """Converte uma pauta em avaliações anuais por aluno.

    Linhas com nota vazia são ignoradas: nota não lançada não equivale a 0.
    """

    def __init__(
        self,
        escala_minima: float = Configuracoes.ESCALA_MINIMA,
        escala_maxima: float = Configuracoes.ESCALA_MAXIMA,
    ):
        self.escala_minima = escala_minima
        self.escala_maxima = escala_maxima

    def importar_arquivo(self, caminho_arquivo: str, alunos_conhecidos: Optional[Iterable[str]] = None) -> ResultadoImportacao:
        """Lê a pauta de um arquivo CSV.

        Parâmetros:
        - caminho_arquivo (str): caminho do CSV
        - alunos_conhecidos (Iterable[str] | None): números de processo aceitos

        Retorno:
        - ResultadoImportacao: avaliações e erros por linha
        """
        logger.info(f"Carregando pauta CSV: {caminho_arquivo}")
        return self.importar_dataframe(self._ler_csv(caminho_arquivo), alunos_conhecidos)

    def importar_dataframe(self, df: pd.DataFrame, alunos_conhecidos: Optional[Iterable[str]] = None) -> ResultadoImportacao:
        """Valida e agrupa uma pauta já carregada.

        Exceções:
        - ErroValidacao: pauta vazia ou sem as colunas obrigatórias
        """
        df = self._normalizar_colunas(df.copy()) if df is not None else df
        CONTRATO_PAUTA.validar(df)

        conhecidos = {str(aluno).strip() for aluno in alunos_conhecidos} if alunos_conhecidos is not None else None
        resultado = ResultadoImportacao()
        por_aluno: Dict[str, AvaliacaoAnualAluno] = {}

        for posicao, (_, linha) in enumerate(df.iterrows(), start=1):
            numero_processo = self._texto(linha.get("NUMERO_PROCESSO"))
            if not numero_processo:
                resultado.erros.append(ErroLinha(linha=posicao, erro="Número de processo ausente"))
                continue
            if conhecidos is not None and numero_processo not in conhecidos:
                resultado.erros.append(ErroLinha(linha=posicao, erro=f"Aluno desconhecido: {numero_processo}"))
                continue

            bruto = linha.get("NOTA")
            if self._vazio(bruto):
                resultado.linhas_sem_nota += 1
                continue

            nota = pd.to_numeric(str(bruto).strip().replace(",", "."), errors="coerce")
            if pd.isna(nota):
                resultado.erros.append(ErroLinha(linha=posicao, erro=f"Nota não numérica: {bruto}"))
                continue

            validacao = validar_valor_nota(float(nota), self.escala_minima, self.escala_maxima)
            if not validacao.valida:
                resultado.erros.append(ErroLinha(linha=posicao, erro=validacao.erro))
                continue

            avaliacao = por_aluno.get(numero_processo)
            if avaliacao is None:
                avaliacao = AvaliacaoAnualAluno(
                    aluno_id=numero_processo,
                    nome=self._texto(linha.get("NOME")) or "",
                    frequencia=self._frequencia(linha.get("FREQUENCIA")),
                )
                por_aluno[numero_processo] = avaliacao

            disciplina_id = self._texto(linha.get("DISCIPLINA_ID"))
            avaliacao.disciplinas.append(
                NotaDisciplina(
                    id=disciplina_id,
                    nome=self._texto(linha.get("DISCIPLINA")) or disciplina_id,
                    nota=float(nota),
                )
            )
            resultado.linhas_importadas += 1

        resultado.avaliacoes = list(por_aluno.values())
        if resultado.erros:
            logger.warning(f"Pauta importada com {len(resultado.erros)} linha(s) rejeitada(s)")
        logger.info(
            f"Pauta importada: {resultado.linhas_importadas} nota(s) de {len(resultado.avaliacoes)} aluno(s)"
        )
        return resultado

    @staticmethod
    def _ler_csv(caminho_arquivo: str) -> pd.DataFrame:
        """Lê um CSV tentando ';' e depois ','.

        Notas e identificadores são lidos como texto para preservar
        zeros à esquerda e detectar valores não numéricos.
        """
        try:
            df = pd.read_csv(caminho_arquivo, sep=";", dtype=str, keep_default_na=False)
            if len(df.columns) <= 1:
                df = pd.read_csv(caminho_arquivo, sep=",", dtype=str, keep_default_na=False)
            return df
        except (OSError, pd.errors.ParserError) as erro:
            logger.error(f"Erro crítico ao ler o CSV: {erro}")
            raise erro

    @staticmethod
    def _normalizar_colunas(df: pd.DataFrame) -> pd.DataFrame:
        """Maiúsculas, sem acentos, espaços trocados por '_' e sinônimos resolvidos."""
        novas_colunas = []
        for coluna in df.columns:
            coluna_limpa = str(coluna).upper().strip()
            coluna_limpa = unicodedata.normalize("NFKD", coluna_limpa).encode("ASCII", "ignore").decode("utf-8")
            coluna_limpa = re.sub(r"[\s.º°]+", "_", coluna_limpa).strip("_")
            novas_colunas.append(SINONIMOS_COLUNAS.get(coluna_limpa, coluna_limpa))

        df.columns = novas_colunas
        if df.columns.duplicated().any():
            df = df.loc[:, ~df.columns.duplicated()]
        return df

    @staticmethod
    def _vazio(valor) -> bool:
        return valor is None or (not isinstance(valor, str) and pd.isna(valor)) or str(valor).strip() == ""

    @staticmethod
    def _texto(valor) -> Optional[str]:
        if ImportadorNotas._vazio(valor):
            return None
        return str(valor).strip()

    @staticmethod
    def _frequencia(valor) -> Optional[float]:
        if ImportadorNotas._vazio(valor):
            return None
        frequencia = pd.to_numeric(str(valor).strip().replace(",", ".").rstrip("%"), errors="coerce")
        if pd.isna(frequencia) or not 0 <= float(frequencia) <= 100:
            return None
        return float(frequencia)
