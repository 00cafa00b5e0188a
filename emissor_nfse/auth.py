import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

import requests
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PrivateFormat,
    NoEncryption,
)
from cryptography.hazmat.primitives.serialization.pkcs12 import (
    load_key_and_certificates,
)

from .exceptions import ApplicationError
from .portal import CERTIFICADO_URL, DASHBOARD_PATH, DEFAULT_TIMEOUT
from .session import Sessao


class Authenticator:
    """Log in to the portal with an A1 certificate (PKCS#12 bundle)."""

    def __init__(self, http: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def pfx_to_pem(self, certificado: bytes, senha: str) -> Iterator[str]:
        """Convert the ``certificado`` bundle to a temporary PEM file."""
        priv_key, cert, add_certs = load_key_and_certificates(
            certificado, senha.encode(), None
        )
        if priv_key is None or cert is None:
            raise ValueError("certificado sem chave privada")
        tmp = tempfile.NamedTemporaryFile(suffix=".pem", delete=False)
        pem_path = tmp.name
        tmp.close()
        with open(pem_path, "wb") as f:
            f.write(priv_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()))
            f.write(cert.public_bytes(Encoding.PEM))
            if add_certs:
                for ca in add_certs:
                    f.write(ca.public_bytes(Encoding.PEM))
        try:
            yield pem_path
        finally:
            os.remove(pem_path)

    def login(self, certificado: bytes, senha: str) -> Sessao:
        """Authenticate and return the cookies of the new session.

        The login only counts when the portal answers with a redirect to
        the dashboard. A response without cookies is returned as an empty
        :class:`Sessao`.
        """
        # The login must not carry cookies from an expired session.
        self.http.cookies.clear()
        try:
            with self.pfx_to_pem(certificado, senha) as pem_cert:
                resp = self.http.get(
                    CERTIFICADO_URL,
                    cert=pem_cert,
                    allow_redirects=False,
                    timeout=self.timeout,
                )
        except (requests.exceptions.RequestException, ValueError, OSError) as e:
            self.logger.error("Erro durante o login: %s", e)
            raise ApplicationError(f"Falha ao realizar login: {e}") from e

        if not 200 <= resp.status_code < 400:
            raise ApplicationError(f"Falha ao realizar login: HTTP {resp.status_code}")

        location = resp.headers.get("Location")
        if not location or not location.endswith(DASHBOARD_PATH):
            raise ApplicationError(
                "Falha ao realizar login: Redirecionamento incorreto ou ausente."
            )

        cookies = tuple(f"{c.name}={c.value}" for c in resp.cookies)
        if not cookies:
            self.logger.warning("Nenhum cookie recebido na resposta do login.")
        else:
            self.logger.info("Login realizado, %d cookie(s) recebido(s).", len(cookies))
        return Sessao(cookies)
