"""Ponto de entrada da API FastAPI.

Responsabilidades:
- Configurar a aplicação FastAPI
- Registrar rotas e eventos
- Inicializar o repositório de matrículas no startup
"""

import os

import uvicorn
from fastapi import FastAPI, HTTPException

from avaliacao.api.classificacao_controller import ControladorClassificacao
from avaliacao.api.formula_controller import ControladorFormulas
from avaliacao.api.matricula_controller import ControladorMatriculas
from avaliacao.api.notas_controller import ControladorNotas
from avaliacao.application.matricula_service import obter_servico_matricula_runtime
from avaliacao.config.settings import Configuracoes
from avaliacao.util.logger import logger

app = FastAPI(
    title="Motor de Avaliação Académica",
    description="API de fórmulas de avaliação, classificação de transição e matrículas",
    version="1.0.0",
)


@app.on_event("startup")
async def evento_inicializacao():
    """Executa ações de inicialização da aplicação.

    Responsabilidades:
    - Registrar log de inicialização
    - Criar o serviço de matrículas sobre o repositório configurado

    Retorno:
    - None: não retorna valor
    """
    logger.info(f"Inicializando recursos da API (repositório: {Configuracoes.REPOSITORIO_MATRICULAS})...")
    obter_servico_matricula_runtime()


controlador_formulas = ControladorFormulas()
app.include_router(controlador_formulas.roteador, prefix="/api/v1", tags=["Fórmulas"])

controlador_notas = ControladorNotas()
app.include_router(controlador_notas.roteador, prefix="/api/v1", tags=["Notas"])

controlador_classificacao = ControladorClassificacao()
app.include_router(controlador_classificacao.roteador, prefix="/api/v1", tags=["Classificação"])

controlador_matriculas = ControladorMatriculas()
app.include_router(controlador_matriculas.roteador, prefix="/api/v1", tags=["Matrículas"])


@app.get("/health", tags=["Infraestrutura"])
def checar_saude():
    """Endpoint de health check.

    Retorno:
    - dict: status da aplicação
    """
    try:
        obter_servico_matricula_runtime()
        return {"status": "ok"}
    except (OSError, ValueError) as erro:
        raise HTTPException(status_code=503, detail=str(erro))


if __name__ == "__main__":
    porta = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=porta)
