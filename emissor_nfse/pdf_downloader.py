import logging
from typing import Optional

import requests

from .exceptions import ApplicationError, UnauthenticatedSessionError
from .portal import DEFAULT_TIMEOUT, DOWNLOAD_DANFSE_URL, get_autenticado
from .session import Sessao
from .storage import Storage


class NFSePDFDownloader:
    """Download the DANFSe (PDF) of one NFS-e from the portal."""

    BASE_URL = DOWNLOAD_DANFSE_URL

    def __init__(
        self,
        storage: Storage,
        http: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.storage = storage
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def baixar(self, sessao: Sessao, chave: str) -> str:
        """Download ``chave`` and return the path where the PDF was stored."""
        url = f"{self.BASE_URL}/{chave}"
        try:
            resp = get_autenticado(self.http, sessao, url, timeout=self.timeout)
            pdf_path = self.storage.store(resp.content, ".pdf")
        except UnauthenticatedSessionError:
            raise
        except Exception as e:
            self.logger.error("Erro ao baixar PDF da NFS-e %s: %s", chave, e)
            raise ApplicationError(f"Falha ao obter PDF da NFSe {chave}: {e}") from e
        self.logger.info("PDF da NFS-e %s salvo em %s", chave, pdf_path)
        return pdf_path
