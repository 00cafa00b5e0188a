"""Dotted-path access over the trees produced by :mod:`emissor_nfse.xml_tree`.

Every XML element may repeat, so children are always wrapped in lists.
``get_nested`` hides that: whenever it meets a list it continues with the
first element, and it returns ``None`` instead of raising on any missing
step.
"""
from collections.abc import Mapping, Sequence
from typing import Any, Optional

ATTRIBUTES = "$"
TEXT = "_"


def _primeiro(node: Any) -> Any:
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
        return node[0] if node else None
    return node


def get_nested(arvore: Any, caminho: str) -> Any:
    """Return the value at ``caminho`` (e.g. ``"emit.enderNac.xLgr"``).

    ``""`` returns the whole tree. Use ``$`` as a segment to reach the
    attributes of an element (``"$.Id"``).
    """
    if arvore is None:
        return None
    if caminho == "":
        return arvore

    atual = arvore
    for parte in caminho.split("."):
        atual = _primeiro(atual)
        if not isinstance(atual, Mapping):
            return None
        atual = atual.get(parte)
        if atual is None:
            return None
    return _primeiro(atual)


def get_text(arvore: Any, caminho: str) -> Optional[str]:
    """Like :func:`get_nested` but always a string or ``None``.

    Elements carrying attributes are mapped as ``{"$": ..., "_": text}``;
    their text is returned.
    """
    valor = get_nested(arvore, caminho)
    if isinstance(valor, Mapping):
        valor = valor.get(TEXT)
    if valor is None or isinstance(valor, str):
        return valor
    return None
