"""Modelos de domínio da classificação de transição.

Responsabilidades:
- Declarar os limiares regulamentares do sistema de ensino angolano
- Representar a nota final de cada disciplina
- Representar o veredito de transição e sua fundamentação
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from avaliacao.config.settings import Configuracoes

FREQUENCIA_MINIMA = 66.67
LIMIAR_PRIMARIO = 5
PISO_SECUNDARIO = 7
LIMIAR_SECUNDARIO = 10


class StatusTransicao(str, Enum):
    """Veredito de transição de ano."""

    TRANSITA = "Transita"
    NAO_TRANSITA = "Não Transita"
    CONDICIONAL = "Condicional"
    AGUARDANDO_NOTAS = "AguardandoNotas"


class NivelEnsino(str, Enum):
    """Conjunto de regras aplicado ao aluno."""

    PRIMARIO = "primario"
    SECUNDARIO = "secundario"

    @classmethod
    def a_partir_de(cls, descricao: Optional[str]) -> "NivelEnsino":
        """Interpreta rótulos livres como 'Ensino Primário' ou 'Ensino Secundário I Ciclo'.

        Qualquer rótulo que não mencione o primário é tratado como secundário.
        """
        texto = (descricao or "").lower()
        if "primário" in texto or "primario" in texto:
            return cls.PRIMARIO
        return cls.SECUNDARIO


class NotaDisciplina(BaseModel):
    """Nota final (MF/MFD) de um aluno numa disciplina."""

    id: str
    nome: str
    nota: float = Field(
        ..., ge=Configuracoes.ESCALA_MINIMA, le=Configuracoes.ESCALA_MAXIMA, allow_inf_nan=False
    )


class ResultadoClassificacao(BaseModel):
    """Veredito imutável produzido pelo classificador."""

    status: StatusTransicao
    motivos: List[str] = Field(default_factory=list)
    disciplinas_em_risco: List[str] = Field(default_factory=list)
    acoes_recomendadas: List[str] = Field(default_factory=list)
    observacao_padronizada: str
    motivo_retencao: Optional[str] = None
    matricula_condicional: bool = False

    model_config = ConfigDict(frozen=True)


class AvaliacaoAnualAluno(BaseModel):
    """Conjunto de notas finais de um aluno num ano lectivo."""

    aluno_id: str = Field(..., min_length=1)
    nome: str = ""
    matricula_id: Optional[str] = None
    disciplinas: List[NotaDisciplina] = Field(default_factory=list)
    frequencia: Optional[float] = Field(None, ge=0, le=100)


class ClassificacaoAluno(BaseModel):
    """Veredito de um aluno dentro da classificação da turma."""

    aluno_id: str
    nome: str = ""
    classificacao: ResultadoClassificacao
    media_geral: float = 0.0


class FalhaClassificacao(BaseModel):
    """Aluno cuja classificação não pôde ser calculada."""

    aluno_id: str
    erro: str


class ClassificacaoTurma(BaseModel):
    """Resultado da classificação de todos os alunos de uma turma."""

    resultados: List[ClassificacaoAluno] = Field(default_factory=list)
    erros: List[FalhaClassificacao] = Field(default_factory=list)
