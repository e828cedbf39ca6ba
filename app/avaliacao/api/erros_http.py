"""Tradução de erros do motor de avaliação em respostas HTTP."""

from fastapi import HTTPException

from avaliacao.domain.erros import ErroMatriculaNaoEncontrada, ErroTransicaoEstado
from avaliacao.util.logger import logger

ERROS_TRADUZIVEIS = (ErroMatriculaNaoEncontrada, ErroTransicaoEstado, ValueError, TypeError, KeyError)


def traduzir_erro(erro: Exception) -> HTTPException:
    """Mapeia a exceção para o status HTTP correspondente.

    - ErroMatriculaNaoEncontrada -> 404
    - ErroTransicaoEstado (inclui ErroConcorrencia) -> 409
    - ValueError/TypeError/KeyError (inclui ErroValidacao e ErroAvaliacao) -> 400
    - demais -> 500
    """
    if isinstance(erro, ErroMatriculaNaoEncontrada):
        return HTTPException(status_code=404, detail=str(erro))
    if isinstance(erro, ErroTransicaoEstado):
        return HTTPException(status_code=409, detail=str(erro))
    if isinstance(erro, (ValueError, TypeError, KeyError)):
        return HTTPException(status_code=400, detail=str(erro))
    logger.error(f"Erro inesperado: {erro}")
    return HTTPException(status_code=500, detail=str(erro))
