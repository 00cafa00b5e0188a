import datetime
from typing import Optional

import requests

from .autologin import AutoLogin
from .config import Config
from .downloader import NFSeDownloader
from .listing import ListingCrawler, NotaEmitida
from .pdf_downloader import NFSePDFDownloader
from .storage import Storage


class NFSeClient:
    """Portal operations wrapped with automatic (re)login."""

    def __init__(
        self,
        config: Config,
        http: Optional[requests.Session] = None,
        autologin: Optional[AutoLogin] = None,
    ):
        self.config = config
        self.http = http if http is not None else requests.Session()
        self.autologin = autologin if autologin is not None else AutoLogin(config)
        storage = Storage(config.storage_dir)
        self.crawler = ListingCrawler(self.http, config.timeout)
        self.downloader = NFSeDownloader(storage, self.http, config.timeout)
        self.pdf_downloader = NFSePDFDownloader(storage, self.http, config.timeout)

    def buscar(self, inicio: datetime.date, fim: datetime.date) -> list[NotaEmitida]:
        return self.autologin.executar(lambda s: self.crawler.buscar(s, inicio, fim))

    def obter(self, chave: str) -> dict:
        return self.autologin.executar(lambda s: self.downloader.obter(s, chave))

    def baixar_pdf(self, chave: str) -> str:
        return self.autologin.executar(lambda s: self.pdf_downloader.baixar(s, chave))

    def close(self) -> None:
        """Close the internal requests session."""
        self.http.close()
