"""Configurações centrais do projeto.

Responsabilidades:
- Definir caminhos de arquivos
- Definir a escala de notas aceita
- Selecionar a implementação do repositório de matrículas
"""

import os
from pathlib import Path


class Configuracoes:
    """Centraliza configurações da aplicação.

    Responsabilidades:
    - Fornecer caminhos de diretórios
    - Declarar limites da escala de notas
    - Declarar parâmetros de persistência
    """

    BASE_DIR = Path(__file__).resolve().parents[2]
    DEFAULT_DATA_DIR = os.path.join(BASE_DIR, "data")
    DATA_DIR = os.path.abspath(os.getenv("DATA_DIR", DEFAULT_DATA_DIR))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    REPOSITORIO_MATRICULAS = os.getenv("REPOSITORIO_MATRICULAS", "memoria").strip().lower()
    MATRICULAS_PATH = os.getenv("MATRICULAS_PATH", os.path.join(DATA_DIR, "matriculas.json"))

    ESCALA_MINIMA = float(os.getenv("ESCALA_MINIMA", "0"))
    ESCALA_MAXIMA = float(os.getenv("ESCALA_MAXIMA", "20"))

    CLASSE_MAXIMA = 12
    CASAS_DECIMAIS = 2

    COLUNAS_PAUTA = [
        "NUMERO_PROCESSO",
        "DISCIPLINA_ID",
        "DISCIPLINA",
        "NOTA",
    ]
