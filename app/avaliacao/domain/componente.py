"""Modelos de domínio para componentes de avaliação e fórmulas.

Responsabilidades:
- Validar definições de componentes (código, peso, trimestre)
- Representar notas lançadas por componente
- Representar configurações de fórmula por disciplina/turma
"""

import math
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from avaliacao.config.settings import Configuracoes

PADRAO_CODIGO_COMPONENTE = r"^[A-Z][A-Z0-9_]*$"


class TipoFormula(str, Enum):
    """Tipo de fórmula configurada para uma disciplina."""

    NOTA_FINAL = "NF"
    MEDIA_TRIMESTRAL = "MT"


class Componente(BaseModel):
    """Componente de avaliação que contribui para a nota da disciplina."""

    id: str = Field(..., min_length=1)
    codigo: str = Field(..., pattern=PADRAO_CODIGO_COMPONENTE, description="Código único, iniciado por maiúscula")
    nome: str = ""
    peso_percentual: float = Field(..., ge=0, le=100)
    calculado: bool = False
    trimestre: Optional[int] = Field(None, ge=1, le=3, description="Nulo para componentes anuais")

    model_config = ConfigDict(frozen=True)


class NotaComponente(BaseModel):
    """Nota lançada para um componente. Ausência de registro significa 'não lançada'."""

    componente_id: str = Field(..., min_length=1)
    valor: float

    @field_validator("valor")
    @classmethod
    def validar_escala(cls, valor: float) -> float:
        # NaN equivale a nota não lançada
        if math.isnan(valor):
            return valor
        if not Configuracoes.ESCALA_MINIMA <= valor <= Configuracoes.ESCALA_MAXIMA:
            raise ValueError(
                f"Nota deve estar entre {Configuracoes.ESCALA_MINIMA:g} e {Configuracoes.ESCALA_MAXIMA:g}"
            )
        return valor


class ConfiguracaoFormula(BaseModel):
    """Fórmula ativa de uma disciplina/turma."""

    disciplina_id: str = ""
    turma_id: str = ""
    tipo: TipoFormula = TipoFormula.NOTA_FINAL
    expressao: str = ""
    pesos_trimestres: Optional[Dict[int, float]] = None
    descricao: Optional[str] = None
    ativo: bool = True
