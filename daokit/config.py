# daokit — thin data-access objects over DB-API connections
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Static database configuration.

The settings are read once at startup and handed to
:func:`daokit.db.connect`.  Explicit keyword arguments are the primary
interface; :meth:`DatabaseConfig.from_env` and
:meth:`DatabaseConfig.from_ini` are alternate constructors for deployments
that keep credentials outside the code.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

BACKENDS = ("sqlite", "postgresql", "mysql")
DEFAULT_ENV_PREFIX = "DAOKIT_DB_"


def _parse_port(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port: {value!r}") from None


@dataclass
class DatabaseConfig:
    """Connection settings for one database.

    Attributes:
        backend: One of ``"sqlite"``, ``"postgresql"``, ``"mysql"``.
        host: Server host name (ignored for SQLite).
        user: Login name (ignored for SQLite).
        password: Login password (ignored for SQLite).
        database: Database name (ignored for SQLite).
        port: Server port, or ``None`` for the driver default.
        charset: Session text encoding negotiated after connecting,
            or ``None`` to keep the server default.
        path: SQLite file path, or ``":memory:"``.
    """

    backend: str = "sqlite"
    host: str = "localhost"
    user: str = ""
    password: str = ""
    database: str = ""
    port: int | None = None
    charset: str | None = None
    path: str = ":memory:"

    def __post_init__(self) -> None:
        if not isinstance(self.backend, str) or self.backend.lower() not in BACKENDS:
            raise ValueError(
                f"Unknown backend {self.backend!r}. "
                f"Expected one of: {', '.join(BACKENDS)}"
            )
        self.backend = self.backend.lower()
        self.port = _parse_port(self.port)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> DatabaseConfig:
        """Build a config from a flat mapping; missing keys take defaults."""
        kwargs: dict[str, Any] = {}
        for key in ("backend", "host", "user", "password", "port", "charset", "path"):
            if values.get(key) not in (None, ""):
                kwargs[key] = values[key]
        database = values.get("database") or values.get("name")
        if database:
            kwargs["database"] = database
        return cls(**kwargs)

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> DatabaseConfig:
        """Read ``<prefix>BACKEND``, ``HOST``, ``PORT``, ``USER``,
        ``PASSWORD``, ``NAME``, ``CHARSET`` and ``PATH`` from the environment.
        """
        env = os.environ if environ is None else environ
        values = {
            key.lower(): env.get(f"{prefix}{key}")
            for key in ("BACKEND", "HOST", "PORT", "USER", "PASSWORD", "NAME", "CHARSET", "PATH")
        }
        return cls.from_mapping(values)

    @classmethod
    def from_ini(cls, path: str | Path, section: str = "database") -> DatabaseConfig:
        """Read settings from one section of an INI file."""
        # Values such as passwords may contain "%"; read them verbatim.
        parser = configparser.ConfigParser(interpolation=None)
        read = parser.read(Path(path).expanduser(), encoding="utf-8")
        if not read:
            raise FileNotFoundError(f"Config file not found: {path}")
        if not parser.has_section(section):
            raise ValueError(f"Config file {path} has no [{section}] section")
        return cls.from_mapping(dict(parser.items(section)))

    def redacted(self) -> dict[str, Any]:
        """Return the settings as a dict safe for logging."""
        return {
            "backend": self.backend,
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": "***" if self.password else "",
            "database": self.database,
            "charset": self.charset,
            "path": self.path,
        }
