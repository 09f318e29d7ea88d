from __future__ import annotations

import logging
import os
import re
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Colaboradores que NÃO entram nos acionamentos (nem na exibição, nem nas atualizações).
DEFAULT_IGNORED_COMMERCIALS = (
    "Caio Zapelini",
    "Rafael Kreusch",
    "Willami Moises Lima",
)

DEFAULT_TV_REFRESH_SECONDS = 60

_logging_configured = False


def configure_logging() -> None:
    global _logging_configured
    if _logging_configured:
        return
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _logging_configured = True


def _sanitize(value: Optional[str]) -> Optional[str]:
    # valores colados de dashboards às vezes vêm com aspas ou espaços sobrando
    if not value:
        return None
    value = value.strip().strip("'\"").strip()
    return value or None


def tv_refresh_seconds() -> int:
    """Intervalo de recarga do modo TV (TV_REFRESH_SECONDS). Valor inválido volta ao padrão."""
    raw = _sanitize(os.environ.get("TV_REFRESH_SECONDS"))
    try:
        seconds = int(raw) if raw else DEFAULT_TV_REFRESH_SECONDS
    except ValueError:
        logger.warning("TV_REFRESH_SECONDS inválido (%r); usando %ss", raw, DEFAULT_TV_REFRESH_SECONDS)
        return DEFAULT_TV_REFRESH_SECONDS
    return seconds if seconds > 0 else DEFAULT_TV_REFRESH_SECONDS


def ignored_commercial_names() -> List[str]:
    """Lista de nomes ignorados: IGNORED_COMMERCIALS (separado por vírgula/;) ou o padrão."""
    raw = _sanitize(os.environ.get("IGNORED_COMMERCIALS"))
    if raw is None:
        return list(DEFAULT_IGNORED_COMMERCIALS)
    return [n.strip() for n in re.split(r"[,;]", raw) if n.strip()]


def database_url() -> Optional[str]:
    """URL do banco: st.secrets['database']['url'] e, na falta, DATABASE_URL."""
    import streamlit as st

    try:
        url = st.secrets["database"]["url"]
    except Exception:
        # sem secrets.toml ou sem a seção [database]
        url = None
    return _sanitize(url) or _sanitize(os.environ.get("DATABASE_URL"))
