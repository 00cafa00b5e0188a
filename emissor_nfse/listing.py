from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import requests
from bs4 import BeautifulSoup

from .exceptions import UnauthenticatedSessionError
from .portal import DEFAULT_TIMEOUT, EMITIDAS_URL, formatar_data, get_autenticado
from .session import Sessao

JANELA_DIAS = 30

DOWNLOAD_HREF = "/EmissorNacional/Notas/Download/NFSe/"
CHAVE_RE = re.compile(r"/EmissorNacional/Notas/Download/NFSe/(\d+)")


@dataclass(frozen=True)
class EmitidoPara:
    cnpj: str
    nome: str


@dataclass(frozen=True)
class NotaEmitida:
    """One row of the "Notas Emitidas" listing."""

    data: str
    emitido_para: EmitidoPara
    competencia: str
    municipio_emissor: str
    valor: Optional[float]
    status: str
    chave: str

    def como_dict(self) -> dict:
        return {
            "data": self.data,
            "emitidoPara": {"cnpj": self.emitido_para.cnpj, "nome": self.emitido_para.nome},
            "competencia": self.competencia,
            "municipioEmissor": self.municipio_emissor,
            "valor": self.valor,
            "status": self.status,
            "chave": self.chave,
        }


def _como_data(valor: Union[datetime.date, datetime.datetime]) -> datetime.date:
    if isinstance(valor, datetime.datetime):
        return valor.date()
    return valor


def janelas(
    inicio: datetime.date, fim: datetime.date, dias: int = JANELA_DIAS
) -> Iterator[tuple[datetime.date, datetime.date]]:
    """Split ``[inicio, fim]`` into consecutive closed windows of ``dias`` days.

    The last window is clipped to ``fim``. Nothing is yielded when
    ``inicio`` is after ``fim``.
    """
    atual = _como_data(inicio)
    fim = _como_data(fim)
    while atual <= fim:
        fim_janela = min(atual + datetime.timedelta(days=dias - 1), fim)
        yield atual, fim_janela
        atual = fim_janela + datetime.timedelta(days=1)


def parse_valor(texto: str) -> Optional[float]:
    """Parse amounts written as ``15.000,00``. Returns ``None`` if not a number."""
    try:
        return float(texto.replace(".", "").replace(",", "."))
    except ValueError:
        return None


def extrair_chave(href: Optional[str]) -> Optional[str]:
    """Return the numeric key of a download link, if ``href`` is one."""
    if not href:
        return None
    match = CHAVE_RE.search(href)
    if match:
        return match.group(1)
    return None


def _texto(tr, seletor: str) -> str:
    el = tr.select_one(seletor)
    if el is None:
        return ""
    return el.get_text().strip()


def _emitido_para(tr) -> EmitidoPara:
    div = tr.select_one("td:nth-child(2) div")
    if div is None:
        return EmitidoPara(cnpj="", nome="")
    cnpj = _texto(div, ".cnpj")
    nome = " ".join(div.get_text().split())
    if cnpj:
        nome = re.sub(r"^[\s-]+", "", nome.replace(cnpj, "", 1)).strip()
    return EmitidoPara(cnpj=cnpj, nome=nome)


def parse_listagem(html: str) -> list[NotaEmitida]:
    """Return the documents listed in one "Notas Emitidas" page.

    Rows without a download link are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    notas = []
    for tr in soup.select("table tbody tr"):
        link = tr.select_one(f'a[href*="{DOWNLOAD_HREF}"]')
        chave = extrair_chave(link.get("href") if link is not None else None)
        if not chave:
            continue
        valor_txt = _texto(tr, "td.td-valor")
        valor = parse_valor(valor_txt)
        if valor is None:
            logging.getLogger(__name__).warning(
                "Valor inválido para a NFS-e %s: %r", chave, valor_txt
            )
        notas.append(
            NotaEmitida(
                data=_texto(tr, "td.td-data"),
                emitido_para=_emitido_para(tr),
                competencia=_texto(tr, "td.td-competencia"),
                municipio_emissor=_texto(tr, "td.td-center"),
                valor=valor,
                status=tr.get("data-situacao", ""),
                chave=chave,
            )
        )
    return notas


class ListingCrawler:
    """Search the documents issued in a date range, 30 days per request."""

    def __init__(self, http: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def buscar(
        self, sessao: Sessao, inicio: datetime.date, fim: datetime.date
    ) -> list[NotaEmitida]:
        """Return every document issued between ``inicio`` and ``fim``.

        A window that fails is logged and skipped; an expired session
        aborts the whole search with :class:`UnauthenticatedSessionError`.
        """
        notas: list[NotaEmitida] = []
        for ini, fim_janela in janelas(inicio, fim):
            periodo = f"{formatar_data(ini)} a {formatar_data(fim_janela)}"
            self.logger.info("Consultando NFS-e de %s...", periodo)
            params = {
                "busca": "",
                "datainicio": formatar_data(ini),
                "datafim": formatar_data(fim_janela),
            }
            try:
                resp = get_autenticado(
                    self.http, sessao, EMITIDAS_URL, params=params, timeout=self.timeout
                )
                encontradas = parse_listagem(resp.text)
            except UnauthenticatedSessionError:
                raise
            except Exception as e:
                self.logger.error("Erro ao consultar o período %s: %s", periodo, e)
                continue
            self.logger.info("%d NFS-e encontrada(s) em %s.", len(encontradas), periodo)
            notas.extend(encontradas)
        return notas
