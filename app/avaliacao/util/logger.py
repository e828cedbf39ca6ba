"""Fábrica de logger do motor de avaliação.

Responsabilidades:
- Configurar uma única vez cada logger nomeado
- Ler o nível de log de Configuracoes.LOG_LEVEL
- Escrever em stdout sem propagar para o logger raiz
"""

import logging
import sys
from typing import Optional

from avaliacao.config.settings import Configuracoes

FORMATO_LOG = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FORMATO_DATA = "%Y-%m-%d %H:%M:%S"


class FabricaLogger:
    """Fornece loggers padronizados para serviços, controladores e CLI."""

    @classmethod
    def configurar(cls, nome: str = "MOTOR_AVALIACAO", nivel: Optional[str] = None) -> logging.Logger:
        """Devolve o logger `nome`, configurando-o na primeira chamada.

        Parâmetros:
        - nome (str): nome do logger
        - nivel (str | None): nível explícito; por padrão Configuracoes.LOG_LEVEL

        Retorno:
        - logging.Logger: logger configurado
        """
        instancia = logging.getLogger(nome)
        if instancia.handlers:
            return instancia

        instancia.setLevel((nivel or Configuracoes.LOG_LEVEL).upper())
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=FORMATO_LOG, datefmt=FORMATO_DATA))
        instancia.addHandler(handler)
        instancia.propagate = False
        return instancia


logger = FabricaLogger.configurar()
