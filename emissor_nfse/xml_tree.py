"""Convert NFS-e XML documents into plain dict/list trees.

Shape of the tree:

* the document is ``{root_tag: element}``;
* an element with children is a dict whose keys are the child tags and
  whose values are lists (an element may repeat);
* attributes live under ``"$"`` and mixed text under ``"_"``;
* a leaf element without attributes is just its text.

Namespaces are dropped from tag and attribute names.
"""
import xml.etree.ElementTree as ET
from typing import Any, Union

from .extractor import ATTRIBUTES, TEXT


def _local(nome: str) -> str:
    return nome.rsplit("}", 1)[-1]


def _elemento(el: ET.Element) -> Any:
    attrs = {_local(k): v for k, v in el.attrib.items()}
    texto = el.text or ""
    filhos = list(el)
    if not filhos:
        if not attrs:
            return texto
        node = {ATTRIBUTES: attrs}
        if texto:
            node[TEXT] = texto
        return node

    node: dict = {}
    if attrs:
        node[ATTRIBUTES] = attrs
    for filho in filhos:
        node.setdefault(_local(filho.tag), []).append(_elemento(filho))
    if texto.strip():
        node[TEXT] = texto.strip()
    return node


def parse_xml(conteudo: Union[bytes, str]) -> dict:
    """Parse ``conteudo`` and return the tree described in the module doc.

    Raises :class:`xml.etree.ElementTree.ParseError` on malformed input.
    """
    root = ET.fromstring(conteudo)
    return {_local(root.tag): _elemento(root)}
