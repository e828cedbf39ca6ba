"""Ponto de entrada da classificação de uma turma a partir de uma pauta CSV.

Responsabilidades:
- Ler a pauta de notas finais
- Classificar todos os alunos da turma
- Imprimir o resultado em JSON e finalizar com código de saída
"""

import argparse
import json
import sys

from avaliacao.application.classificador_transicao import calcular_classificacao_turma
from avaliacao.infrastructure.data.importador_notas import ImportadorNotas
from avaliacao.util.logger import logger


def criar_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classifica a transição de ano dos alunos de uma turma.")
    parser.add_argument("--arquivo", required=True, help="Pauta CSV (NUMERO_PROCESSO, DISCIPLINA_ID, DISCIPLINA, NOTA)")
    parser.add_argument("--nivel", default=None, help='Nível de ensino, ex.: "Ensino Primário"')
    parser.add_argument("--classe", default=None, help='Classe da turma, ex.: "7ª Classe"')
    parser.add_argument(
        "--obrigatorias",
        default="",
        help="Ids das disciplinas obrigatórias separados por vírgula",
    )
    parser.add_argument("--saida", default=None, help="Arquivo JSON de saída (padrão: stdout)")
    return parser


def executar(argumentos) -> dict:
    """Importa a pauta e classifica a turma.

    Retorno:
    - dict: classificações, falhas por aluno e rejeições da pauta
    """
    importacao = ImportadorNotas().importar_arquivo(argumentos.arquivo)
    ids_obrigatorias = [item.strip() for item in argumentos.obrigatorias.split(",") if item.strip()] or None
    turma = calcular_classificacao_turma(
        importacao.avaliacoes, argumentos.nivel, argumentos.classe, ids_obrigatorias
    )
    saida = turma.model_dump(mode="json")
    saida["linhas_rejeitadas"] = [erro.model_dump() for erro in importacao.erros]
    return saida


def main(argv=None) -> int:
    argumentos = criar_parser().parse_args(argv)
    logger.info("Iniciando classificação da turma...")

    try:
        saida = executar(argumentos)
    except (OSError, ValueError) as erro:
        logger.error(f"Falha ao classificar a turma: {erro}")
        return 1

    conteudo = json.dumps(saida, ensure_ascii=False, indent=2)
    if argumentos.saida:
        with open(argumentos.saida, "w", encoding="utf-8") as arquivo:
            arquivo.write(conteudo)
    else:
        print(conteudo)
    logger.info("Processo concluído com sucesso!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
