from __future__ import annotations

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ApplicationError


@dataclass
class Config:
    cert_path: str = ""
    cert_pass: str = ""
    storage_dir: str = "./storage"
    log_dir: str = "logs"
    timeout: int = 30
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 3000

    # Environment variable for each field, used by ``from_env``.
    ENV_VARS = {
        "cert_path": "CERT_FILE",
        "cert_pass": "CERT_PASSWORD",
        "storage_dir": "STORAGE_PATH",
        "log_dir": "LOG_DIR",
        "timeout": "NFSE_TIMEOUT",
        "transport": "MCP_TRANSPORT",
        "host": "MCP_HOST",
        "port": "MCP_PORT",
    }
    INT_FIELDS = ("timeout", "port")

    @classmethod
    def load(cls, path: str) -> "Config":
        """Load configuration from ``path`` or create it with defaults.

        Values set in the environment (or in a ``.env`` file) override the
        ones read from the file.
        """
        created = False
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = {}
            created = True
        cfg_data = asdict(cls())
        cfg_data.update({k: v for k, v in data.items() if k in cfg_data})
        cfg = cls(**cfg_data)
        if created:
            cfg.save(path)
        return cfg.with_env()

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Config":
        """Build the configuration from defaults plus the environment."""
        return cls().with_env(dotenv_path)

    def with_env(self, dotenv_path: Optional[str] = None) -> "Config":
        load_dotenv(dotenv_path)
        cfg_data = asdict(self)
        for field_name, var in self.ENV_VARS.items():
            value = os.environ.get(var)
            if not value:
                continue
            if field_name in self.INT_FIELDS:
                try:
                    cfg_data[field_name] = int(value)
                except ValueError as e:
                    raise ApplicationError(f"Valor inválido para {var}: {value}") from e
            else:
                cfg_data[field_name] = value
        return type(self)(**cfg_data)

    def save(self, path: str) -> None:
        """Persist configuration to ``path`` as JSON."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2, ensure_ascii=False)

    def ler_certificado(self) -> bytes:
        """Return the bytes of the certificate bundle at ``cert_path``."""
        if not self.cert_pass:
            raise ApplicationError("CERT_PASSWORD não configurado.")
        if not self.cert_path:
            raise ApplicationError("CERT_FILE não configurado.")
        pfx_path = Path(self.cert_path).resolve()
        if not pfx_path.is_file():
            raise ApplicationError(f"Certificado não encontrado em {pfx_path}")
        try:
            return pfx_path.read_bytes()
        except OSError as e:
            raise ApplicationError(f"Falha ao ler o certificado {pfx_path}: {e}") from e
