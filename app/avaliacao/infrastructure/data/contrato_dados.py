"""Validação de contrato de dados das pautas.

Responsabilidades:
- Validar presença de colunas obrigatórias
- Normalizar colunas textuais
- Falhar explicitamente se contrato for violado
"""

from typing import List

import pandas as pd

from avaliacao.config.settings import Configuracoes
from avaliacao.domain.erros import ErroValidacao
from avaliacao.util.logger import logger


class ContratoDataFrame:
    """Define e valida contrato de dados para DataFrames.

    Responsabilidades:
    - Especificar colunas obrigatórias
    - Converter colunas identificadoras para texto
    - Falhar com mensagem clara se violado
    """

    def __init__(self, colunas_obrigatorias: List[str], colunas_texto: List[str] = None):
        """Inicializa o contrato.

        Parâmetros:
        - colunas_obrigatorias (list): colunas que devem estar presentes
        - colunas_texto (list): colunas convertidas para str sem espaços nas bordas
        """
        self.colunas_obrigatorias = colunas_obrigatorias
        self.colunas_texto = colunas_texto or []

    def validar(self, df: pd.DataFrame) -> None:
        """Valida o DataFrame contra o contrato.

        Parâmetros:
        - df (pd.DataFrame): DataFrame a validar

        Exceções:
        - ErroValidacao: quando contrato é violado
        """
        if df is None or df.empty:
            raise ErroValidacao("Pauta vazia ou nula. Impossível validar contrato.")

        colunas_faltantes = [c for c in self.colunas_obrigatorias if c not in df.columns]
        if colunas_faltantes:
            raise ErroValidacao(
                f"Contrato de dados violado: colunas obrigatórias ausentes: {colunas_faltantes}. "
                f"Colunas disponíveis: {list(df.columns)}"
            )

        for coluna in self.colunas_texto:
            if coluna in df.columns:
                df[coluna] = df[coluna].where(df[coluna].isna(), df[coluna].astype(str).str.strip())

        logger.info(f"Contrato de dados validado com sucesso. {len(df)} registros.")


CONTRATO_PAUTA = ContratoDataFrame(
    colunas_obrigatorias=Configuracoes.COLUNAS_PAUTA,
    colunas_texto=["NUMERO_PROCESSO", "DISCIPLINA_ID", "DISCIPLINA", "NOME"],
)
