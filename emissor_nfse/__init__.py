from .auth import Authenticator
from .autologin import AutoLogin
from .client import NFSeClient
from .config import Config
from .downloader import NFSeDownloader
from .exceptions import ApplicationError, UnauthenticatedSessionError
from .listing import ListingCrawler, NotaEmitida
from .pdf_downloader import NFSePDFDownloader
from .session import Sessao
from .storage import Storage

__all__ = [
    "Authenticator",
    "AutoLogin",
    "NFSeClient",
    "Config",
    "NFSeDownloader",
    "ApplicationError",
    "UnauthenticatedSessionError",
    "ListingCrawler",
    "NotaEmitida",
    "NFSePDFDownloader",
    "Sessao",
    "Storage",
]
