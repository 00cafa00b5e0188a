"""MCP server exposing the portal operations as tools.

Failures are reported to the MCP client as tool errors (``isError``)
carrying a readable message; they never take the server down.
"""
import datetime
import logging
import sys
from functools import lru_cache
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .client import NFSeClient
from .config import Config
from .exceptions import ApplicationError
from .logs import configurar_log

TRANSPORTS = ("stdio", "streamable-http")

logger = logging.getLogger(__name__)

mcp = FastMCP("mcp-nfse-nacional")


@lru_cache(maxsize=1)
def get_client() -> NFSeClient:
    return NFSeClient(Config.from_env())


def _erro(prefixo: str, e: Exception) -> ToolError:
    logger.error("%s: %s", prefixo, e)
    return ToolError(f"{prefixo}: {e}")


@mcp.tool()
def nfse_buscar(
    data_inicio: Annotated[str, Field(description="Data de início no formato YYYY-MM-DD")],
    data_fim: Annotated[str, Field(description="Data de fim no formato YYYY-MM-DD")],
) -> dict:
    """Busca notas fiscais de serviço eletrônicas (NFSe) emitidas em um período.

    Retorna lista com data, destinatário, valor, status e chave de cada nota.
    """
    try:
        inicio = datetime.date.fromisoformat(data_inicio)
        fim = datetime.date.fromisoformat(data_fim)
    except ValueError:
        raise ToolError("Datas inválidas. Use o formato YYYY-MM-DD.") from None
    try:
        notas = get_client().buscar(inicio, fim)
    except Exception as e:
        raise _erro("Erro ao buscar NFSe", e) from e
    return {"total": len(notas), "notas": [n.como_dict() for n in notas]}


@mcp.tool()
def nfse_detalhes(
    chave: Annotated[str, Field(description="Chave identificadora da NFSe")],
) -> dict:
    """Obtém os detalhes completos de uma NFSe específica a partir de sua chave.

    Retorna dados do cabeçalho, emitente, valores, DPS e salva o XML localmente.
    """
    try:
        return get_client().obter(chave)
    except Exception as e:
        raise _erro("Erro ao obter detalhes da NFSe", e) from e


@mcp.tool()
def nfse_pdf(
    chave: Annotated[str, Field(description="Chave identificadora da NFSe")],
) -> dict:
    """Baixa o PDF (DANFSe) de uma NFSe específica a partir de sua chave.

    Retorna o caminho do arquivo PDF salvo localmente.
    """
    try:
        pdf_path = get_client().baixar_pdf(chave)
    except Exception as e:
        raise _erro("Erro ao baixar PDF da NFSe", e) from e
    return {"pdf_path": pdf_path}


def main() -> int:
    try:
        cfg = Config.from_env()
    except ApplicationError as e:
        print(f"Erro de configuração: {e}", file=sys.stderr)
        return 1
    configurar_log(cfg.log_dir)

    transport = cfg.transport if cfg.transport in TRANSPORTS else "stdio"
    mcp.settings.host = cfg.host
    mcp.settings.port = cfg.port
    if transport == "streamable-http":
        logger.info("Servidor MCP NFSe em http://%s:%s/mcp", cfg.host, cfg.port)
    else:
        logger.info("Servidor MCP NFSe em stdio")
    mcp.run(transport=transport)
    return 0
