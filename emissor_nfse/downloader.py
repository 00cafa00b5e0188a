import logging
from typing import Optional

import requests

from .exceptions import ApplicationError, UnauthenticatedSessionError
from .normalizer import normalizar
from .portal import DEFAULT_TIMEOUT, DOWNLOAD_NFSE_URL, get_autenticado
from .session import Sessao
from .storage import Storage
from .xml_tree import parse_xml


class NFSeDownloader:
    """Download the XML of one NFS-e and return its normalized content."""

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

    def obter(self, sessao: Sessao, chave: str) -> dict:
        """Fetch ``chave``, keep the raw XML in storage and normalize it."""
        url = f"{DOWNLOAD_NFSE_URL}/{chave}"
        try:
            resp = get_autenticado(self.http, sessao, url, timeout=self.timeout)
            xml_bytes = resp.content
            arvore = parse_xml(xml_bytes)
            xml_path = self.storage.store(xml_bytes, ".xml")
        except UnauthenticatedSessionError:
            raise
        except Exception as e:
            self.logger.error("Erro ao obter NFS-e %s: %s", chave, e)
            raise ApplicationError(f"Falha ao obter NFSe {chave}: {e}") from e
        self.logger.info("XML da NFS-e %s salvo em %s", chave, xml_path)
        return normalizar(arvore, xml_path)
