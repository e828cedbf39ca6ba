"""Fixtures compartilhadas para os testes."""

import sys
from pathlib import Path

import pytest


RAIZ = Path(__file__).resolve().parents[2]
DIRETORIO_APP = RAIZ / "app"
if str(DIRETORIO_APP) not in sys.path:
    sys.path.insert(0, str(DIRETORIO_APP))

from avaliacao.application.matricula_service import ServicoMatricula  # noqa: E402
from avaliacao.domain.classificacao import NotaDisciplina  # noqa: E402
from avaliacao.domain.componente import Componente  # noqa: E402
from avaliacao.domain.matricula import AlunoMatriculavel, TurmaOrigem  # noqa: E402
from avaliacao.infrastructure.data.matricula_repository import RepositorioMatriculasMemoria  # noqa: E402


@pytest.fixture()
def componentes_exemplo():
    """Componentes trimestrais clássicos (MAC 40%, NPP 30%, NPT 30%)."""
    return [
        Componente(id="c1", codigo="MAC", nome="Média das Aulas Contínuas", peso_percentual=40, trimestre=1),
        Componente(id="c2", codigo="NPP", nome="Nota da Prova do Professor", peso_percentual=30, trimestre=1),
        Componente(id="c3", codigo="NPT", nome="Nota da Prova Trimestral", peso_percentual=30, trimestre=1),
    ]


@pytest.fixture()
def disciplinas_aprovadas():
    """Notas finais todas acima de 10."""
    return [
        NotaDisciplina(id="d1", nome="Língua Portuguesa", nota=12),
        NotaDisciplina(id="d2", nome="Matemática", nota=14),
        NotaDisciplina(id="d3", nome="Física", nota=11),
    ]


@pytest.fixture()
def repositorio():
    return RepositorioMatriculasMemoria()


@pytest.fixture()
def servico(repositorio):
    return ServicoMatricula(repositorio)


@pytest.fixture()
def turma_exemplo():
    return TurmaOrigem(id="t1", escola_id="e1", nome="7ª Classe A", ano_lectivo="2025", nivel_ensino="Ensino Secundário I Ciclo")


@pytest.fixture()
def alunos_exemplo():
    return [
        AlunoMatriculavel(id="a1", nome_completo="Ana Silva", frequencia_anual=95),
        AlunoMatriculavel(id="a2", nome_completo="Bruno Costa", frequencia_anual=80),
        AlunoMatriculavel(id="a3", nome_completo="Carla Neto", ativo=False),
    ]
