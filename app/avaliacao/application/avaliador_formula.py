"""Avaliador restrito de fórmulas de notas.

Responsabilidades:
- Converter a expressão em tokens e numa árvore sintática
- Resolver códigos de componentes a partir dos valores lançados
- Calcular o resultado sem recorrer a `eval`

Gramática aceita:

    expressao  := soma
    soma       := termo (("+" | "-") termo)*
    termo      := unario (("*" | "/") unario)*
    unario     := ("+" | "-") unario | primario
    primario   := NUMERO | CODIGO | chamada | "(" expressao ")"
    chamada    := FUNCAO "(" argumentos ")"          (modo estendido)
    condicao   := soma (COMPARADOR soma)?            (1º argumento de if)

Funções do modo estendido: min, max, round e if(condicao, entao, senao).
"""

import math
import re
from numbers import Real
from typing import Dict, List, Mapping, Optional, Set, Tuple

from avaliacao.domain.erros import ErroAvaliacao
from avaliacao.util.arredondamento import arredondar_meio_acima

FUNCOES_PERMITIDAS = ("min", "max", "round", "if")
COMPARADORES = (">=", "<=", "==", "!=", ">", "<")

_PADRAO_TOKEN = re.compile(
    r"\s*(?:(?P<numero>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<nome>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<simbolo>>=|<=|==|!=|[-+*/(),<>]))"
)

Token = Tuple[str, str]
No = tuple


def tokenizar(expressao: str) -> List[Token]:
    """Divide a expressão em tokens (tipo, texto).

    Exceções:
    - ErroAvaliacao: quando há caractere fora da gramática
    """
    tokens: List[Token] = []
    posicao = 0
    fim = len(expressao.rstrip())
    while posicao < fim:
        correspondencia = _PADRAO_TOKEN.match(expressao, posicao)
        if correspondencia is None or correspondencia.end() == posicao:
            raise ErroAvaliacao(f"Caractere inválido na fórmula na posição {posicao}: '{expressao[posicao]}'")
        tipo = correspondencia.lastgroup
        tokens.append((tipo, correspondencia.group(tipo)))
        posicao = correspondencia.end()
    return tokens


class _Analisador:
    """Analisador descendente recursivo que produz tuplas como nós da árvore."""

    def __init__(self, tokens: List[Token], estendido: bool):
        self.tokens = tokens
        self.posicao = 0
        self.estendido = estendido

    def _atual(self) -> Optional[Token]:
        if self.posicao < len(self.tokens):
            return self.tokens[self.posicao]
        return None

    def _consumir(self, texto: Optional[str] = None) -> Token:
        token = self._atual()
        if token is None:
            raise ErroAvaliacao("Fim inesperado da fórmula")
        if texto is not None and token[1] != texto:
            raise ErroAvaliacao(f"Esperado '{texto}' mas encontrado '{token[1]}'")
        self.posicao += 1
        return token

    def _simbolo_atual(self, *opcoes: str) -> bool:
        token = self._atual()
        return token is not None and token[0] == "simbolo" and token[1] in opcoes

    def analisar(self) -> No:
        if not self.tokens:
            raise ErroAvaliacao("Fórmula vazia")
        arvore = self._soma()
        if self._atual() is not None:
            raise ErroAvaliacao(f"Token inesperado na fórmula: '{self._atual()[1]}'")
        return arvore

    def _soma(self) -> No:
        no = self._termo()
        while self._simbolo_atual("+", "-"):
            operador = self._consumir()[1]
            no = ("binario", operador, no, self._termo())
        return no

    def _termo(self) -> No:
        no = self._unario()
        while self._simbolo_atual("*", "/"):
            operador = self._consumir()[1]
            no = ("binario", operador, no, self._unario())
        return no

    def _unario(self) -> No:
        if self._simbolo_atual("+", "-"):
            operador = self._consumir()[1]
            return ("unario", operador, self._unario())
        return self._primario()

    def _primario(self) -> No:
        token = self._consumir()
        tipo, texto = token

        if tipo == "numero":
            return ("numero", float(texto))

        if tipo == "nome":
            if self._simbolo_atual("("):
                return self._chamada(texto)
            return ("codigo", texto)

        if texto == "(":
            no = self._soma()
            self._consumir(")")
            return no

        raise ErroAvaliacao(f"Token inesperado na fórmula: '{texto}'")

    def _chamada(self, nome: str) -> No:
        if not self.estendido:
            raise ErroAvaliacao(f"Funções não são permitidas nesta fórmula: '{nome}'")
        if nome not in FUNCOES_PERMITIDAS:
            raise ErroAvaliacao(f"Função desconhecida: '{nome}'")

        self._consumir("(")
        argumentos = [self._condicao() if nome == "if" else self._soma()]
        while self._simbolo_atual(","):
            self._consumir(",")
            argumentos.append(self._soma())
        self._consumir(")")

        if nome == "if" and len(argumentos) != 3:
            raise ErroAvaliacao("if exige exatamente 3 argumentos: if(condicao, entao, senao)")
        if nome == "round" and len(argumentos) not in (1, 2):
            raise ErroAvaliacao("round exige 1 ou 2 argumentos")
        return ("chamada", nome, argumentos)

    def _condicao(self) -> No:
        esquerda = self._soma()
        if self._simbolo_atual(*COMPARADORES):
            operador = self._consumir()[1]
            return ("comparacao", operador, esquerda, self._soma())
        return esquerda


def analisar_expressao(expressao: str, estendido: bool = True) -> No:
    """Constrói a árvore sintática de uma fórmula.

    Parâmetros:
    - expressao (str): fórmula escrita pelo utilizador
    - estendido (bool): aceita min/max/round/if quando verdadeiro

    Retorno:
    - tuple: raiz da árvore sintática

    Exceções:
    - ErroAvaliacao: quando a expressão não pertence à gramática
    """
    if expressao is None or not str(expressao).strip():
        raise ErroAvaliacao("Fórmula vazia")
    return _Analisador(tokenizar(str(expressao)), estendido).analisar()


def codigos_da_arvore(arvore: No) -> Set[str]:
    """Lista os códigos de componentes referenciados numa árvore."""
    tipo = arvore[0]
    if tipo == "codigo":
        return {arvore[1]}
    if tipo == "unario":
        return codigos_da_arvore(arvore[2])
    if tipo in ("binario", "comparacao"):
        return codigos_da_arvore(arvore[2]) | codigos_da_arvore(arvore[3])
    if tipo == "chamada":
        codigos: Set[str] = set()
        for argumento in arvore[2]:
            codigos |= codigos_da_arvore(argumento)
        return codigos
    return set()


def _valor_componente(codigo: str, valores: Mapping[str, float]) -> float:
    valor = valores.get(codigo)
    if valor is None or isinstance(valor, bool) or not isinstance(valor, Real) or math.isnan(valor):
        raise ErroAvaliacao(f"Valor inválido para componente {codigo}")
    return float(valor)


def _calcular(no: No, valores: Mapping[str, float]) -> float:
    tipo = no[0]

    if tipo == "numero":
        return no[1]

    if tipo == "codigo":
        return _valor_componente(no[1], valores)

    if tipo == "unario":
        operando = _calcular(no[2], valores)
        return -operando if no[1] == "-" else operando

    if tipo == "binario":
        esquerda = _calcular(no[2], valores)
        direita = _calcular(no[3], valores)
        operador = no[1]
        if operador == "+":
            return esquerda + direita
        if operador == "-":
            return esquerda - direita
        if operador == "*":
            return esquerda * direita
        if direita == 0:
            raise ErroAvaliacao("Divisão por zero na fórmula")
        return esquerda / direita

    if tipo == "comparacao":
        return 1.0 if _comparar(no[1], _calcular(no[2], valores), _calcular(no[3], valores)) else 0.0

    nome, argumentos = no[1], no[2]
    if nome == "if":
        condicao = _calcular(argumentos[0], valores)
        return _calcular(argumentos[1] if condicao != 0 else argumentos[2], valores)

    resolvidos = [_calcular(argumento, valores) for argumento in argumentos]
    if nome == "min":
        return min(resolvidos)
    if nome == "max":
        return max(resolvidos)
    casas = int(resolvidos[1]) if len(resolvidos) == 2 else 0
    return arredondar_meio_acima(resolvidos[0], casas)


def _comparar(operador: str, esquerda: float, direita: float) -> bool:
    if operador == ">":
        return esquerda > direita
    if operador == "<":
        return esquerda < direita
    if operador == ">=":
        return esquerda >= direita
    if operador == "<=":
        return esquerda <= direita
    if operador == "==":
        return esquerda == direita
    return esquerda != direita


def avaliar_formula(expressao: str, valores: Dict[str, float], estendido: bool = True) -> float:
    """Avalia uma fórmula substituindo os códigos pelos valores lançados.

    Os códigos são resolvidos token a token, portanto um código nunca
    corresponde a parte de um identificador maior (MAC não afeta MAC2).
    Zero é um valor válido; apenas ausência, None ou NaN são rejeitados.

    Parâmetros:
    - expressao (str): fórmula, ex.: "MAC * 0.4 + NPP * 0.6"
    - valores (dict): código do componente -> valor numérico
    - estendido (bool): aceita min/max/round/if

    Retorno:
    - float: resultado finito

    Exceções:
    - ErroAvaliacao: valor ausente, sintaxe inválida ou resultado não finito
    """
    arvore = analisar_expressao(expressao, estendido=estendido)
    try:
        resultado = _calcular(arvore, valores or {})
    except OverflowError as erro:
        raise ErroAvaliacao(f"Resultado da fórmula não é um número finito: {erro}") from erro

    if not math.isfinite(resultado):
        raise ErroAvaliacao("Resultado da fórmula não é um número finito")
    return resultado
