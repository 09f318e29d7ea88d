from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from src.text import norm_key

DAY_SECONDS = 24 * 60 * 60

INVALID_ANCHOR_MSG = "Horário inválido. Use HH:MM (24h)."

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# As linhas passam por norm_key antes (minúsculas, sem acento), então "atrás" vira "atras".
_HOJE_RE = re.compile(r"\bhoje\b\s*,?\s*(\d{1,2}:\d{2})")
_MIN_RE = re.compile(r"\b(\d+)\s*(minuto|minutos|min)\s*atras\b")
_SEC_RE = re.compile(r"\b(\d+)\s*(segundo|segundos|seg)\s*atras\b")
_HOUR_RE = re.compile(r"\b(\d+)\s*(hora|horas|hr|hrs)\s*atras\b")
_ONTEM_RE = re.compile(r"\bontem\b\s*,?\s*(\d{1,2}:\d{2})")
_ABS_FULL_RE = re.compile(r"\b(\d{1,2})[./](\d{1,2})[./](\d{4})\s*,?\s*(\d{1,2}:\d{2})")
_ABS_BR_RE = re.compile(r"\b(\d{1,2})\s+de\s+\w+\s*,?\s*(\d{1,2}:\d{2})")
_ABS_SHORT_RE = re.compile(r"\b(\d{1,2})[./](\d{1,2})\s*,?\s*(\d{1,2}:\d{2})")


class InvalidAnchorError(ValueError):
    """Horário atual informado pelo usuário fora do formato HH:MM (24h)."""

    def __init__(self, value: str = "") -> None:
        super().__init__(INVALID_ANCHOR_MSG)
        self.value = value


@dataclass(frozen=True)
class TimePhrase:
    seconds_of_day: int
    age_seconds: int
    hhmm: str

    @property
    def hour(self) -> int:
        return int(self.hhmm[:2])


def parse_hhmm(text: str | None) -> Optional[int]:
    """Converte 'HH:MM' em segundos do dia. None se inválido."""
    m = _HHMM_RE.match((text or "").strip())
    if not m:
        return None
    hh, mm = int(m.group(1)), int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        return None
    return hh * 3600 + mm * 60


def seconds_to_hhmm(sec: int) -> str:
    return f"{sec // 3600:02d}:{(sec % 3600) // 60:02d}"


def normalize_hhmm(text: str | None) -> Optional[str]:
    sec = parse_hhmm(text)
    return None if sec is None else seconds_to_hhmm(sec)


def parse_anchor(text: str | None) -> int:
    sec = parse_hhmm(text)
    if sec is None:
        raise InvalidAnchorError(text or "")
    return sec


def _wrap(sec: int) -> int:
    return sec % DAY_SECONDS


def _at(t: str, age_of) -> Optional[TimePhrase]:
    sec = parse_hhmm(t)
    if sec is None:
        return None
    return TimePhrase(sec, age_of(sec), seconds_to_hhmm(sec))


def _ago(n: str, unit: int, anchor: int) -> Optional[TimePhrase]:
    try:
        age = int(n) * unit
    except ValueError:
        # número longo demais para converter: a linha não é um marcador de horário
        return None
    sec = _wrap(anchor - age)
    return TimePhrase(sec, age, seconds_to_hhmm(sec))


def resolve_time_phrase(line: str, anchor: int) -> Optional[TimePhrase]:
    """
    Interpreta a linha de horário da timeline do Bitrix em relação ao horário âncora
    (segundos do dia). Retorna None quando a linha não é um marcador de horário.

    Datas absolutas (DD/MM/AAAA, "DD de mês", DD/MM) não têm a diferença de dias
    calculada: ficam como "mais antigas que ontem" (2 dias + diferença de horário),
    o que basta para ordenar quem é mais antigo.
    """
    s = norm_key(line)

    m = _HOJE_RE.search(s)
    if m:
        return _at(m.group(1), lambda sec: anchor - sec if anchor >= sec else anchor - sec + DAY_SECONDS)

    m = _MIN_RE.search(s)
    if m:
        return _ago(m.group(1), 60, anchor)

    m = _SEC_RE.search(s)
    if m:
        return _ago(m.group(1), 1, anchor)

    m = _HOUR_RE.search(s)
    if m:
        return _ago(m.group(1), 3600, anchor)

    m = _ONTEM_RE.search(s)
    if m:
        return _at(m.group(1), lambda sec: DAY_SECONDS + (anchor - sec))

    for rx, group in ((_ABS_FULL_RE, 4), (_ABS_BR_RE, 2), (_ABS_SHORT_RE, 3)):
        m = rx.search(s)
        if m:
            return _at(m.group(group), lambda sec: max(2 * DAY_SECONDS + (anchor - sec), 0))

    return None
