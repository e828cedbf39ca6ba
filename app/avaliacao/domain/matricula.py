"""Modelos de domínio da matrícula anual.

Responsabilidades:
- Declarar os estados possíveis de uma matrícula
- Representar o registro persistido com a cópia do veredito
- Representar relatórios de operações em lote e resumos
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from avaliacao.domain.classificacao import StatusTransicao


class EstadoMatricula(str, Enum):
    """Estado do ciclo de vida da matrícula."""

    PENDENTE = "pendente"
    AGUARDANDO_EXAME = "aguardando_exame"
    EXAME_REALIZADO = "exame_realizado"
    CONFIRMADA = "confirmada"
    CANCELADA = "cancelada"


class ResultadoExame(str, Enum):
    """Resultado do exame extraordinário."""

    APROVADO = "aprovado"
    REPROVADO = "reprovado"


class Matricula(BaseModel):
    """Matrícula de um aluno para o ano lectivo seguinte.

    O campo `versao` é incrementado a cada escrita e usado como verificação
    otimista pelo repositório.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    aluno_id: str = Field(..., min_length=1)
    escola_id: str = ""
    turma_origem_id: Optional[str] = None
    turma_destino_id: Optional[str] = None
    ano_lectivo_origem: str = Field(..., min_length=1)
    ano_lectivo_destino: str = Field(..., min_length=1)

    status_transicao: StatusTransicao = StatusTransicao.AGUARDANDO_NOTAS
    estado_matricula: EstadoMatricula = EstadoMatricula.PENDENTE

    disciplinas_em_risco: List[str] = Field(default_factory=list)
    observacao_padronizada: Optional[str] = None
    motivo_retencao: Optional[str] = None
    media_geral: Optional[float] = None
    frequencia_anual: Optional[float] = None
    matricula_condicional: bool = False

    resultado_exame: Optional[ResultadoExame] = None
    data_exame: Optional[date] = None
    nota_exame: Optional[float] = None
    observacao_exame: Optional[str] = None

    classe_origem: Optional[str] = None
    classe_destino: Optional[str] = None

    confirmado_por: Optional[str] = None
    confirmado_em: Optional[datetime] = None
    criado_em: datetime = Field(default_factory=datetime.now)
    atualizado_em: datetime = Field(default_factory=datetime.now)
    versao: int = 0


class AlunoMatriculavel(BaseModel):
    """Aluno da turma de origem considerado na geração de matrículas."""

    id: str = Field(..., min_length=1)
    nome_completo: str = ""
    numero_processo: Optional[str] = None
    ativo: bool = True
    frequencia_anual: Optional[float] = Field(None, ge=0, le=100)


class TurmaOrigem(BaseModel):
    """Turma cujos alunos recebem matrículas pendentes."""

    id: str = Field(..., min_length=1)
    escola_id: str = ""
    nome: str = ""
    ano_lectivo: str = Field(..., min_length=1)
    nivel_ensino: Optional[str] = None


class FalhaLote(BaseModel):
    """Falha individual dentro de uma operação em lote."""

    id: str
    erro: str


class RelatorioLote(BaseModel):
    """Resultado por item de uma operação em lote."""

    sucesso: int = 0
    confirmadas: List[str] = Field(default_factory=list)
    erros: List[FalhaLote] = Field(default_factory=list)


class ResumoMatriculas(BaseModel):
    """Contagens de matrículas de uma escola/ano lectivo."""

    total: int = 0
    transitados: int = 0
    nao_transitados: int = 0
    condicionais: int = 0
    aguardando_notas: int = 0
    pendentes: int = 0
    confirmadas: int = 0
    aguardando_exame: int = 0
    exame_realizado: int = 0
    canceladas: int = 0
    por_estado: Dict[str, int] = Field(default_factory=dict)
