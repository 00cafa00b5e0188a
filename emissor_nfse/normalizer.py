from collections.abc import Mapping
from typing import Any, Optional

from .extractor import get_nested, get_text


def _campos(node: Any, caminhos: dict) -> dict:
    """Read every ``{campo: caminho}`` of ``caminhos`` from ``node``."""
    return {campo: get_text(node, caminho) for campo, caminho in caminhos.items()}


CABECALHO = {
    "id": "$.Id",
    "municipio_emissor": "xLocEmi",
    "municipio_prestacao": "xLocPrestacao",
    "numero_nfse": "nNFSe",
    "codigo_municipio_incidencia": "cLocIncid",
    "municipio_incidencia": "xLocIncid",
    "tributacao_nacional": "xTribNac",
    "nbs": "xNBS",
    "versao_aplicativo": "verAplic",
    "ambiente_gerador": "ambGer",
    "tipo_emissao": "tpEmis",
    "processo_emissao": "procEmi",
    "status_emissao": "cStat",
    "data_hora_processamento": "dhProc",
    "numero_documento_municipal": "nDFSe",
}

EMITENTE = {
    "cnpj": "emit.CNPJ",
    "inscricao_municipal": "emit.IM",
    "razao_social": "emit.xNome",
}

EMITENTE_ENDERECO = {
    "logradouro": "emit.enderNac.xLgr",
    "numero": "emit.enderNac.nro",
    "bairro": "emit.enderNac.xBairro",
    "codigo_municipio": "emit.enderNac.cMun",
    "uf": "emit.enderNac.UF",
    "cep": "emit.enderNac.CEP",
}

VALORES = {
    "base_calculo": "valores.vBC",
    "aliquota": "valores.pAliqAplic",
    "issqn": "valores.vISSQN",
    "total_retencoes": "valores.vTotalRet",
    "valor_liquido": "valores.vLiq",
    "valor_deducao": "valores.vCalcDR",
}

DPS = {
    "id": "$.Id",
    "tipo_ambiente": "tpAmb",
    "data_emissao": "dhEmi",
    "numero_dps": "nDPS",
    "serie": "serie",
    "competencia": "dCompet",
    "tipo_emitente": "tpEmit",
    "local_emissao": "cLocEmi",
}

PRESTADOR = {
    "cnpj": "prest.CNPJ",
    "inscricao_municipal": "prest.IM",
}

TOMADOR_ENDERECO = {
    "logradouro": "toma.end.xLgr",
    "numero": "toma.end.nro",
    "bairro": "toma.end.xBairro",
    "codigo_municipio": "toma.end.endNac.cMun",
    "cep": "toma.end.endNac.CEP",
}

SERVICO = {
    "codigo_tributacao_nacional": "serv.cServ.cTribNac",
    "descricao": "serv.cServ.xDescServ",
    "nbs": "serv.cServ.cNBS",
    "local_prestacao": "serv.locPrest.cLocPrestacao",
}


def _tomador(dps: Any) -> dict:
    tomador = {
        "cnpj": get_text(dps, "toma.CNPJ"),
        "cpf": None,
        "razao_social": get_text(dps, "toma.xNome"),
        "endereco": _campos(dps, TOMADOR_ENDERECO),
    }
    # Individuals are identified by CPF instead of CNPJ.
    if get_nested(dps, "toma.CPF") is not None:
        tomador["cpf"] = get_text(dps, "toma.CPF")
    return tomador


def _dps(inf: Any) -> dict:
    dps = get_nested(inf, "DPS.infDPS")
    if dps is None:
        return {}
    resultado = _campos(dps, DPS)
    resultado["prestador"] = _campos(dps, PRESTADOR)
    resultado["tomador"] = _tomador(dps)
    resultado["servico"] = _campos(dps, SERVICO)
    resultado["valores_dps"] = {
        "valor_servico": get_text(dps, "valores.vServPrest.vServ"),
    }
    return resultado


def normalizar(arvore: Any, xml_path: Optional[str]) -> dict:
    """Project the parsed NFS-e XML ``arvore`` into the detail record.

    Documents without ``NFSe/infNFSe`` are returned as
    ``{"raw": arvore, "xml_path": xml_path}``.
    """
    raiz = arvore.get("NFSe") if isinstance(arvore, Mapping) else None
    if raiz is None or get_nested(raiz, "infNFSe") is None:
        return {"raw": arvore, "xml_path": xml_path}

    inf = get_nested(arvore, "NFSe.infNFSe")
    emitente = _campos(inf, EMITENTE)
    emitente["endereco"] = _campos(inf, EMITENTE_ENDERECO)
    emitente["telefone"] = get_text(inf, "emit.fone")
    emitente["email"] = get_text(inf, "emit.email")

    return {
        "cabecalho": _campos(inf, CABECALHO),
        "emitente": emitente,
        "valores": _campos(inf, VALORES),
        "dps": _dps(inf),
        "xml_path": xml_path,
    }
