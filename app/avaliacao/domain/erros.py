"""Taxonomia de erros do motor de avaliação.

Responsabilidades:
- Separar falhas de validação, de cálculo e de transição de estado
- Permitir que a camada de API traduza cada família em um status HTTP
"""


class ErroMotorAvaliacao(Exception):
    """Erro base de todas as falhas do motor."""


class ErroValidacao(ErroMotorAvaliacao, ValueError):
    """Fórmula malformada, componente desconhecido ou pesos inconsistentes."""


class ErroAvaliacao(ErroMotorAvaliacao, ValueError):
    """Valor ausente ou resultado não finito ao calcular uma nota."""


class ErroTransicaoEstado(ErroMotorAvaliacao, RuntimeError):
    """Transição de matrícula inválida para o estado atual."""


class ErroConcorrencia(ErroTransicaoEstado):
    """A matrícula foi alterada por outro processo entre a leitura e a escrita."""


class ErroMatriculaNaoEncontrada(ErroMotorAvaliacao, LookupError):
    """Nenhuma matrícula com o identificador informado."""
