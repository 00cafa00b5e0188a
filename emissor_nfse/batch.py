import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable

from .client import NFSeClient
from .exceptions import ApplicationError

logger = logging.getLogger(__name__)


@dataclass
class Resumo:
    encontradas: int = 0
    xml_baixados: int = 0
    pdf_baixados: int = 0
    falhas: list = field(default_factory=list)


def run(
    client: NFSeClient,
    inicio: datetime.date,
    fim: datetime.date,
    baixar_pdf: bool = True,
    write: Callable[[str, bool], None] = lambda msg, log=True: None,
) -> Resumo:
    """Search the documents of ``[inicio, fim]`` and download each of them.

    A failure on one document is reported through ``write`` and the batch
    goes on with the next key.
    """
    resumo = Resumo()
    write(f"Consultando NFS-e de {inicio:%d/%m/%Y} a {fim:%d/%m/%Y}...", log=True)
    notas = client.buscar(inicio, fim)
    resumo.encontradas = len(notas)
    write(f"{len(notas)} NFS-e encontrada(s).", log=True)

    for i, nota in enumerate(notas, start=1):
        chave = nota.chave
        write(f"[{i}/{len(notas)}] NFS-e {chave}", log=True)
        try:
            detalhe = client.obter(chave)
            resumo.xml_baixados += 1
            write(f"XML salvo: {detalhe.get('xml_path')}", log=True)
            if baixar_pdf:
                pdf_path = client.baixar_pdf(chave)
                resumo.pdf_baixados += 1
                write(f"PDF salvo: {pdf_path}", log=True)
        except ApplicationError as e:
            logger.error("Erro ao processar NFS-e %s: %s", chave, e)
            resumo.falhas.append(chave)
            write(f"Falha ao processar NFS-e {chave}: {e}", log=False)

    write(
        f"Processo concluído. XML: {resumo.xml_baixados}, PDF: {resumo.pdf_baixados}, "
        f"falhas: {len(resumo.falhas)}",
        log=True,
    )
    return resumo
