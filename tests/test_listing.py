import datetime
import math
import sys
from pathlib import Path

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from emissor_nfse.exceptions import UnauthenticatedSessionError
from emissor_nfse.listing import (
    ListingCrawler,
    extrair_chave,
    janelas,
    parse_listagem,
    parse_valor,
)
from emissor_nfse.portal import EMITIDAS_URL
from emissor_nfse.session import Sessao


def linha(chave, valor="15.000,00", situacao="1"):
    return f"""
    <tr data-situacao="{situacao}">
      <td class="td-data">10/01/2025</td>
      <td>
        <div>
          <span class="cnpj">12.345.678/0001-90</span>
          - Empresa   Exemplo
          LTDA
        </div>
      </td>
      <td class="td-competencia">01/2025</td>
      <td class="td-center">Florianópolis/SC</td>
      <td class="td-valor">{valor}</td>
      <td>
        <div class="menu-content">
          <a href="/EmissorNacional/Notas/Visualizar/{chave}">Ver</a>
          <a href="/EmissorNacional/Notas/Download/NFSe/{chave}">XML</a>
        </div>
      </td>
    </tr>
    """


def pagina(*linhas):
    return "<html><body><table><thead><tr><th>Data</th></tr></thead><tbody>" + "".join(linhas) + "</tbody></table></body></html>"


class DummyResp:
    def __init__(self, status=200, text="", headers=None, url=EMITIDAS_URL):
        self.status_code = status
        self.text = text
        self.content = text.encode()
        self.headers = headers or {}
        self.url = url


class DummySession:
    def __init__(self, respostas):
        self.respostas = list(respostas)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        resp = self.respostas.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def test_janelas_partition():
    inicio = datetime.date(2024, 12, 15)
    for n_dias in list(range(1, 95)) + [365, 366]:
        fim = inicio + datetime.timedelta(days=n_dias - 1)
        jan = list(janelas(inicio, fim))
        assert len(jan) == math.ceil(n_dias / 30)
        assert jan[0][0] == inicio
        assert jan[-1][1] == fim
        for ini, fim_j in jan:
            assert ini <= fim_j
            assert (fim_j - ini).days + 1 <= 30
        for (_, fim_a), (ini_b, _) in zip(jan, jan[1:]):
            assert ini_b == fim_a + datetime.timedelta(days=1)


def test_janelas_primeira_janela_fechada():
    jan = list(janelas(datetime.date(2025, 1, 1), datetime.date(2025, 3, 31)))
    assert jan == [
        (datetime.date(2025, 1, 1), datetime.date(2025, 1, 30)),
        (datetime.date(2025, 1, 31), datetime.date(2025, 3, 1)),
        (datetime.date(2025, 3, 2), datetime.date(2025, 3, 31)),
    ]


def test_janelas_intervalo_invertido():
    assert list(janelas(datetime.date(2025, 2, 1), datetime.date(2025, 1, 1))) == []


def test_janelas_aceita_datetime():
    jan = list(janelas(datetime.datetime(2025, 1, 1, 0, 0), datetime.datetime(2025, 1, 1, 23, 59)))
    assert jan == [(datetime.date(2025, 1, 1), datetime.date(2025, 1, 1))]


@pytest.mark.parametrize(
    "texto, esperado",
    [("15.000,00", 15000.00), ("0,50", 0.5), ("1.234.567,89", 1234567.89), ("100", 100.0)],
)
def test_parse_valor(texto, esperado):
    assert parse_valor(texto) == esperado


def test_parse_valor_invalido():
    assert parse_valor("") is None
    assert parse_valor("R$ abc") is None


def test_extrair_chave():
    assert extrair_chave("/EmissorNacional/Notas/Download/NFSe/123456") == "123456"
    assert extrair_chave("/EmissorNacional/Notas/Download/NFSe/") is None
    assert extrair_chave(None) is None


def test_parse_listagem():
    notas = parse_listagem(pagina(linha("123456")))
    assert len(notas) == 1
    nota = notas[0]
    assert nota.chave == "123456"
    assert nota.data == "10/01/2025"
    assert nota.emitido_para.cnpj == "12.345.678/0001-90"
    assert nota.emitido_para.nome == "Empresa Exemplo LTDA"
    assert nota.competencia == "01/2025"
    assert nota.municipio_emissor == "Florianópolis/SC"
    assert nota.valor == 15000.0
    assert nota.status == "1"
    assert nota.como_dict()["emitidoPara"] == {
        "cnpj": "12.345.678/0001-90",
        "nome": "Empresa Exemplo LTDA",
    }


def test_parse_listagem_ignora_linhas_sem_chave():
    sem_link = '<tr><td colspan="6">Nenhum registro encontrado</td></tr>'
    link_quebrado = '<tr><td><a href="/EmissorNacional/Notas/Download/NFSe/abc">x</a></td></tr>'
    notas = parse_listagem(pagina(sem_link, linha("1"), link_quebrado, linha("2")))
    assert [n.chave for n in notas] == ["1", "2"]


def test_parse_listagem_valor_invalido():
    notas = parse_listagem(pagina(linha("9", valor="-")))
    assert notas[0].valor is None


def test_parse_listagem_sem_situacao():
    sem_situacao = linha("7").replace(' data-situacao="1"', "")
    notas = parse_listagem(pagina(sem_situacao))
    assert notas[0].status == ""
    assert notas[0].como_dict()["status"] == ""


def test_buscar_envia_periodo_e_cookies():
    http = DummySession([DummyResp(text=pagina(linha("1")))])
    crawler = ListingCrawler(http, timeout=5)
    sessao = Sessao(("a=1", "b=2"))
    notas = crawler.buscar(sessao, datetime.date(2025, 1, 1), datetime.date(2025, 1, 10))
    assert [n.chave for n in notas] == ["1"]
    url, kwargs = http.calls[0]
    assert url == EMITIDAS_URL
    assert kwargs["params"] == {"busca": "", "datainicio": "01/01/2025", "datafim": "10/01/2025"}
    assert kwargs["headers"] == {"Cookie": "a=1; b=2"}
    assert kwargs["allow_redirects"] is False
    assert kwargs["timeout"] == 5


def test_buscar_continua_apos_falha_de_janela():
    http = DummySession(
        [
            DummyResp(text=pagina(linha("1"), linha("2"))),
            requests.exceptions.ConnectionError("conexão recusada"),
            DummyResp(text=pagina(linha("3"))),
        ]
    )
    crawler = ListingCrawler(http)
    notas = crawler.buscar(Sessao(("a=1",)), datetime.date(2025, 1, 1), datetime.date(2025, 3, 31))
    assert [n.chave for n in notas] == ["1", "2", "3"]
    assert [c[1]["params"]["datainicio"] for c in http.calls] == [
        "01/01/2025",
        "31/01/2025",
        "02/03/2025",
    ]


def test_buscar_ignora_status_de_erro():
    http = DummySession([DummyResp(status=500), DummyResp(text=pagina(linha("7")))])
    crawler = ListingCrawler(http)
    notas = crawler.buscar(Sessao(("a=1",)), datetime.date(2025, 1, 1), datetime.date(2025, 2, 15))
    assert [n.chave for n in notas] == ["7"]


def test_buscar_sessao_expirada_interrompe():
    http = DummySession(
        [
            DummyResp(text=pagina(linha("1"))),
            DummyResp(status=302, headers={"Location": "/EmissorNacional/Login?ReturnUrl=%2f"}),
            DummyResp(text=pagina(linha("3"))),
        ]
    )
    crawler = ListingCrawler(http)
    with pytest.raises(UnauthenticatedSessionError):
        crawler.buscar(Sessao(("a=1",)), datetime.date(2025, 1, 1), datetime.date(2025, 3, 31))
    assert len(http.calls) == 2


def test_buscar_sessao_expirada_pela_url_final():
    http = DummySession(
        [DummyResp(url="https://www.nfse.gov.br/EmissorNacional/Login", text="<html></html>")]
    )
    crawler = ListingCrawler(http)
    with pytest.raises(UnauthenticatedSessionError):
        crawler.buscar(Sessao(("a=1",)), datetime.date(2025, 1, 1), datetime.date(2025, 1, 2))
