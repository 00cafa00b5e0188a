import argparse
import datetime
import logging
import sys
from typing import Optional

from emissor_nfse import ApplicationError, Config, NFSeClient
from emissor_nfse.batch import run
from emissor_nfse.logs import configurar_log

CONFIG_FILE = "config.json"

logger = logging.getLogger(__name__)


def parse_data(valor: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(valor)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Data inválida: {valor} (use YYYY-MM-DD)")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Baixa XML e PDF das NFS-e emitidas no Emissor Nacional."
    )
    parser.add_argument("--inicio", type=parse_data, help="data inicial (YYYY-MM-DD)")
    parser.add_argument("--fim", type=parse_data, help="data final (YYYY-MM-DD)")
    parser.add_argument("--sem-pdf", action="store_true", help="não baixar o PDF (DANFSe)")
    parser.add_argument("--config", default=CONFIG_FILE, help="arquivo de configuração")
    args = parser.parse_args(argv)
    if args.fim is None:
        args.fim = datetime.date.today()
    if args.inicio is None:
        args.inicio = args.fim - datetime.timedelta(days=29)
    if args.inicio > args.fim:
        parser.error("a data inicial deve ser anterior à data final")
    return args


def write(msg: str, log: bool = True) -> None:
    now = datetime.datetime.now().strftime("%H:%M:%S")
    print(f"[{now}] {msg}")
    if log:
        logger.info(msg)


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = Config.load(args.config)
    except (ApplicationError, ValueError, OSError) as e:
        print(f"Erro de configuração: {e}", file=sys.stderr)
        return 1

    log_name = configurar_log(cfg.log_dir)
    write(f"Log registrado em: {log_name}", log=False)

    client = None
    try:
        client = NFSeClient(cfg)
        run(client, args.inicio, args.fim, baixar_pdf=not args.sem_pdf, write=write)
    except ApplicationError as e:
        logger.error("Erro: %s", e)
        write(f"Erro: {e}", log=False)
        return 1
    finally:
        if client is not None:
            client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
