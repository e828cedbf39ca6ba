"""Repositórios de matrículas.

Responsabilidades:
- Definir o contrato de acesso a matrículas usado pelo serviço
- Garantir escrita atômica com verificação otimista de versão
- Persistir matrículas em memória ou em arquivo JSON
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from avaliacao.config.settings import Configuracoes
from avaliacao.domain.erros import ErroConcorrencia, ErroMatriculaNaoEncontrada
from avaliacao.domain.matricula import EstadoMatricula, Matricula
from avaliacao.util.logger import logger


class RepositorioMatriculas(ABC):
    """Contrato do armazenamento de matrículas."""

    @abstractmethod
    def obter(self, matricula_id: str) -> Matricula:
        """Retorna uma cópia da matrícula ou lança ErroMatriculaNaoEncontrada."""

    @abstractmethod
    def listar(self, escola_id: Optional[str] = None, ano_lectivo_origem: Optional[str] = None) -> List[Matricula]:
        """Lista matrículas, mais recentes primeiro."""

    @abstractmethod
    def buscar_ativa(self, aluno_id: str, ano_lectivo_origem: str) -> Optional[Matricula]:
        """Retorna a matrícula não cancelada do aluno para o ano de origem."""

    @abstractmethod
    def inserir(self, matricula: Matricula) -> Matricula:
        """Insere uma matrícula nova."""

    @abstractmethod
    def atualizar(self, matricula: Matricula, versao_esperada: int) -> Matricula:
        """Grava a matrícula se a versão armazenada ainda for `versao_esperada`.

        Exceções:
        - ErroConcorrencia: quando outro processo já alterou o registro
        """


class RepositorioMatriculasMemoria(RepositorioMatriculas):
    """Repositório thread-safe mantido em memória.

    Responsabilidades:
    - Guardar cópias, nunca referências compartilhadas com o chamador
    - Serializar leituras e escritas com um lock
    """

    def __init__(self):
        self._registros: Dict[str, Matricula] = {}
        self._lock = threading.RLock()

    def obter(self, matricula_id: str) -> Matricula:
        with self._lock:
            matricula = self._registros.get(matricula_id)
            if matricula is None:
                raise ErroMatriculaNaoEncontrada(f"Matrícula não encontrada: {matricula_id}")
            return matricula.model_copy(deep=True)

    def listar(self, escola_id: Optional[str] = None, ano_lectivo_origem: Optional[str] = None) -> List[Matricula]:
        with self._lock:
            registros = [
                matricula.model_copy(deep=True)
                for matricula in self._registros.values()
                if (escola_id is None or matricula.escola_id == escola_id)
                and (ano_lectivo_origem is None or matricula.ano_lectivo_origem == ano_lectivo_origem)
            ]
        return sorted(registros, key=lambda matricula: matricula.criado_em, reverse=True)

    def buscar_ativa(self, aluno_id: str, ano_lectivo_origem: str) -> Optional[Matricula]:
        with self._lock:
            for matricula in self._registros.values():
                if (
                    matricula.aluno_id == aluno_id
                    and matricula.ano_lectivo_origem == ano_lectivo_origem
                    and matricula.estado_matricula != EstadoMatricula.CANCELADA
                ):
                    return matricula.model_copy(deep=True)
        return None

    def inserir(self, matricula: Matricula) -> Matricula:
        with self._lock:
            if matricula.id in self._registros:
                raise ErroConcorrencia(f"Matrícula já existe: {matricula.id}")
            self._gravar(matricula.model_copy(deep=True))
        return matricula

    def atualizar(self, matricula: Matricula, versao_esperada: int) -> Matricula:
        with self._lock:
            atual = self._registros.get(matricula.id)
            if atual is None:
                raise ErroMatriculaNaoEncontrada(f"Matrícula não encontrada: {matricula.id}")
            if atual.versao != versao_esperada:
                raise ErroConcorrencia(
                    f"Matrícula {matricula.id} foi alterada por outro processo "
                    f"(versão {atual.versao}, esperada {versao_esperada})"
                )
            gravada = matricula.model_copy(
                deep=True, update={"versao": versao_esperada + 1, "atualizado_em": datetime.now()}
            )
            self._gravar(gravada)
            return gravada.model_copy(deep=True)

    def _gravar(self, matricula: Matricula) -> None:
        """Aplica a escrita em memória e a desfaz se a persistência falhar."""
        anterior = self._registros.get(matricula.id)
        self._registros[matricula.id] = matricula
        try:
            self._apos_escrita()
        except Exception:
            if anterior is None:
                del self._registros[matricula.id]
            else:
                self._registros[matricula.id] = anterior
            raise

    def _apos_escrita(self) -> None:
        """Gancho chamado com o lock adquirido após cada escrita."""


class RepositorioMatriculasJson(RepositorioMatriculasMemoria):
    """Repositório em memória com espelho em arquivo JSON.

    Responsabilidades:
    - Carregar as matrículas existentes na inicialização
    - Regravar o arquivo de forma atômica após cada escrita
    """

    def __init__(self, caminho: Optional[str] = None):
        super().__init__()
        self.caminho = caminho or Configuracoes.MATRICULAS_PATH
        self._carregar()

    def _carregar(self) -> None:
        if not os.path.exists(self.caminho):
            logger.info(f"Arquivo de matrículas inexistente, iniciando vazio: {self.caminho}")
            return

        with open(self.caminho, "r", encoding="utf-8") as arquivo:
            conteudo = json.load(arquivo)

        for item in conteudo:
            matricula = Matricula.model_validate(item)
            self._registros[matricula.id] = matricula
        logger.info(f"{len(self._registros)} matrículas carregadas de {self.caminho}")

    def _apos_escrita(self) -> None:
        diretorio = os.path.dirname(self.caminho)
        if diretorio:
            os.makedirs(diretorio, exist_ok=True)
        temporario = f"{self.caminho}.tmp"
        dados = [matricula.model_dump(mode="json") for matricula in self._registros.values()]
        with open(temporario, "w", encoding="utf-8") as arquivo:
            json.dump(dados, arquivo, ensure_ascii=False, indent=2)
        os.replace(temporario, self.caminho)


def criar_repositorio_matriculas() -> RepositorioMatriculas:
    """Cria o repositório configurado em REPOSITORIO_MATRICULAS."""
    if Configuracoes.REPOSITORIO_MATRICULAS == "json":
        return RepositorioMatriculasJson(Configuracoes.MATRICULAS_PATH)
    return RepositorioMatriculasMemoria()
