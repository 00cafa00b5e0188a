import logging
import threading
from typing import Callable, Optional, TypeVar

from .auth import Authenticator
from .config import Config
from .exceptions import ApplicationError, UnauthenticatedSessionError
from .session import Sessao

T = TypeVar("T")


class AutoLogin:
    """Keep one portal session and log in again when it expires.

    This is the only place where the cached session changes. ``garantir``
    holds a lock, so concurrent callers share a single login.
    """

    def __init__(self, config: Config, authenticator: Optional[Authenticator] = None):
        self.config = config
        self.authenticator = (
            authenticator if authenticator is not None else Authenticator(timeout=config.timeout)
        )
        self.logger = logging.getLogger(__name__)
        self._sessao: Optional[Sessao] = None
        self._lock = threading.Lock()

    @property
    def sessao(self) -> Optional[Sessao]:
        return self._sessao

    def garantir(self) -> Sessao:
        """Return the cached session, logging in first if there is none."""
        with self._lock:
            if self._sessao is not None:
                return self._sessao
            certificado = self.config.ler_certificado()
            sessao = self.authenticator.login(certificado, self.config.cert_pass)
            if not sessao:
                raise ApplicationError("Nenhum cookie recebido após login.")
            self._sessao = sessao
            return sessao

    def invalidar(self, sessao: Optional[Sessao] = None) -> None:
        """Drop the cached session.

        With ``sessao``, only drop it if it is still the cached one; another
        caller may already have logged in again.
        """
        with self._lock:
            if sessao is None or self._sessao is sessao:
                self._sessao = None

    def executar(self, acao: Callable[[Sessao], T]) -> T:
        """Run ``acao`` with a valid session, retrying once after a new login."""
        sessao = self.garantir()
        try:
            return acao(sessao)
        except UnauthenticatedSessionError:
            self.logger.info("Sessão expirada, realizando novo login.")
            self.invalidar(sessao)
            return acao(self.garantir())
