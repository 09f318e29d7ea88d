from __future__ import annotations

import re
import unicodedata

_SPACES_RE = re.compile(r"\s+")


def strip_accents(s: str) -> str:
    s = unicodedata.normalize("NFKD", s or "")
    return "".join(ch for ch in s if not unicodedata.combining(ch))


def norm_key(s: str | None, *, accents: bool = False) -> str:
    """
    Normaliza string para comparação: lower + espaços colapsados (inclui NBSP).
    Por padrão remove acentos; com accents=True mantém (usado para empresas).
    """
    s = (s or "").lower()
    if not accents:
        s = strip_accents(s)
    return _SPACES_RE.sub(" ", s).strip()


def account_key(s: str | None) -> str:
    """Chave de deduplicação de empresa: sem case e sem espaços extras, acentos mantidos."""
    return norm_key(s, accents=True)
