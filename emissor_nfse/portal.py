"""Addresses of the Emissor Nacional portal and the authenticated GET."""
from __future__ import annotations

import datetime
from typing import Optional

import requests

from .exceptions import ApplicationError, UnauthenticatedSessionError
from .session import Sessao

BASE_URL = "https://www.nfse.gov.br/EmissorNacional"
CERTIFICADO_URL = f"{BASE_URL}/Certificado"
EMITIDAS_URL = f"{BASE_URL}/Notas/Emitidas"
DOWNLOAD_NFSE_URL = f"{BASE_URL}/Notas/Download/NFSe"
DOWNLOAD_DANFSE_URL = f"{BASE_URL}/Notas/Download/DANFSe"

DASHBOARD_PATH = "/EmissorNacional/Dashboard"
LOGIN_PATH = "/EmissorNacional/Login"

DEFAULT_TIMEOUT = 30


def formatar_data(data: datetime.date) -> str:
    """Return ``data`` as ``DD/MM/YYYY``, the format used by the portal."""
    return data.strftime("%d/%m/%Y")


def sessao_expirada(resp) -> bool:
    """Return ``True`` when ``resp`` points back to the portal login page.

    The portal never says the session expired; it redirects to the login
    page instead. Both the final URL and a pending ``Location`` are checked.
    """
    url = getattr(resp, "url", None) or ""
    if LOGIN_PATH in url:
        return True
    location = resp.headers.get("Location") or ""
    return LOGIN_PATH in location


def get_autenticado(
    http: requests.Session,
    sessao: Sessao,
    url: str,
    params: Optional[dict] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> requests.Response:
    """GET ``url`` with the cookies of ``sessao`` without following redirects.

    Raises :class:`UnauthenticatedSessionError` when the portal sends the
    request to the login page and :class:`ApplicationError` for statuses
    outside ``[200, 400)``.
    """
    resp = http.get(
        url,
        params=params,
        headers={"Cookie": sessao.cabecalho_cookie()},
        allow_redirects=False,
        timeout=timeout,
    )
    if sessao_expirada(resp):
        raise UnauthenticatedSessionError()
    if not 200 <= resp.status_code < 400:
        raise ApplicationError(f"Resposta inesperada do portal: HTTP {resp.status_code}")
    return resp
