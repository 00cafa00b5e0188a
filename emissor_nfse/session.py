from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Sessao:
    """Cookies obtained from one login on the portal.

    Validity is only discovered on use: the portal answers with a redirect
    to its login page once the session has expired.
    """

    cookies: tuple[str, ...] = field(default_factory=tuple)

    def cabecalho_cookie(self) -> str:
        """Return the value for the ``Cookie`` request header."""
        return "; ".join(self.cookies)

    def __bool__(self) -> bool:
        return bool(self.cookies)

    def __len__(self) -> int:
        return len(self.cookies)
