import logging
import os
import uuid
from typing import Union

from .exceptions import ApplicationError


class Storage:
    """Write downloaded documents under ``root`` with random file names."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        self.logger = logging.getLogger(__name__)
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            self.logger.error("Erro ao criar %s: %s", self.root, e)
            raise ApplicationError(f"Falha ao criar diretório {self.root}: {e}") from e

    def store(self, conteudo: Union[bytes, str], extensao: str) -> str:
        """Save ``conteudo`` and return the absolute path of the new file."""
        if not extensao.startswith("."):
            extensao = "." + extensao
        path = os.path.join(self.root, f"{uuid.uuid4().hex}{extensao}")
        try:
            if isinstance(conteudo, str):
                with open(path, "w", encoding="utf-8") as f:
                    f.write(conteudo)
            else:
                with open(path, "wb") as f:
                    f.write(conteudo)
        except OSError as e:
            self.logger.error("Erro ao salvar %s: %s", path, e)
            raise ApplicationError(f"Falha ao salvar arquivo: {e}") from e
        self.logger.info("Arquivo salvo: %s", path)
        return path
