"""Corpos de requisição da API."""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from avaliacao.domain.classificacao import AvaliacaoAnualAluno, NotaDisciplina
from avaliacao.domain.componente import Componente, ConfiguracaoFormula, NotaComponente
from avaliacao.domain.matricula import AlunoMatriculavel, ResultadoExame, TurmaOrigem


class RequisicaoValidarFormula(BaseModel):
    expressao: str = ""
    codigos_validos: List[str] = Field(default_factory=list)


class RequisicaoValidarFormulaPonderada(BaseModel):
    expressao: str = ""
    componentes: List[Componente] = Field(default_factory=list)


class RequisicaoValidarFormulaMT(BaseModel):
    expressao: str = ""


class RequisicaoAvaliarFormula(BaseModel):
    expressao: str
    valores: Dict[str, float] = Field(default_factory=dict)
    estendido: bool = True


class RequisicaoNotaFinalFormula(BaseModel):
    expressao: str
    componentes: List[Componente]
    notas: Dict[str, float] = Field(default_factory=dict, description="Código do componente -> nota")


class RequisicaoMediaTrimestral(BaseModel):
    notas_trimestres: Dict[int, Optional[float]] = Field(default_factory=dict)
    configuracao: Optional[ConfiguracaoFormula] = None
    tipo_padrao: str = Field("simples", pattern="^(simples|ponderada|custom)$")


class RequisicaoAgregarNotas(BaseModel):
    notas: List[NotaComponente] = Field(default_factory=list)
    componentes: List[Componente] = Field(default_factory=list)


class RequisicaoEstatisticasLancamento(BaseModel):
    notas: Dict[str, Optional[float]] = Field(default_factory=dict, description="Aluno -> nota lançada")
    total_alunos: int = Field(..., ge=0)
    limiar_aprovacao: float = 10


class RequisicaoEstatisticasTurma(BaseModel):
    notas_finais: List[float] = Field(default_factory=list)


class RequisicaoClassificacao(BaseModel):
    disciplinas: List[NotaDisciplina] = Field(default_factory=list)
    nivel_ensino: Optional[str] = None
    classe: Optional[str] = None
    ids_obrigatorias: Optional[List[str]] = None
    frequencia: Optional[float] = Field(None, ge=0, le=100)


class RequisicaoClassificacaoTurma(BaseModel):
    avaliacoes: List[AvaliacaoAnualAluno] = Field(default_factory=list)
    nivel_ensino: Optional[str] = None
    classe: Optional[str] = None
    ids_obrigatorias: Optional[List[str]] = None


class RequisicaoGerarMatriculas(BaseModel):
    turma: TurmaOrigem
    alunos: List[AlunoMatriculavel] = Field(default_factory=list)
    ano_lectivo_destino: Optional[str] = None


class RequisicaoConfirmarMatricula(BaseModel):
    turma_destino_id: str
    classe_destino: Optional[str] = None
    confirmado_por: Optional[str] = None


class RequisicaoExame(BaseModel):
    resultado: ResultadoExame
    nota: float
    data_exame: Optional[date] = None
    observacao: Optional[str] = None


class RequisicaoConfirmarLote(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    turma_destino_id: str
    confirmado_por: Optional[str] = None
