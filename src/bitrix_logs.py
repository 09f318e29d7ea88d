from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from src.bitrix_time import parse_anchor, resolve_time_phrase, seconds_to_hhmm
from src.text import norm_key

logger = logging.getLogger(__name__)

NEGOCIO = "NEGÓCIO"
LEAD = "LEAD"

ETAPA_ALTERADA = "ETAPA_ALTERADA"
ATIVIDADE_CRIADA = "ATIVIDADE_CRIADA"
STATUS_ATIVIDADE_ALTERADA = "STATUS_ATIVIDADE_ALTERADA"
CHAMADA_TELEFONICA = "CHAMADA_TELEFONICA"
OUTROS = "OUTROS"

# Ordem importa: primeiro trecho encontrado define a categoria.
_ACTION_PHRASES = (
    ("etapa alterada", ETAPA_ALTERADA),
    ("atividade criada", ATIVIDADE_CRIADA),
    ("status da atividade", STATUS_ATIVIDADE_ALTERADA),
    ("chamada telefonica criada", CHAMADA_TELEFONICA),
)

ACTION_CATEGORIES = (
    ETAPA_ALTERADA,
    ATIVIDADE_CRIADA,
    STATUS_ATIVIDADE_ALTERADA,
    CHAMADA_TELEFONICA,
    OUTROS,
)

_LINE_SPLIT_RE = re.compile(r"\r?\n")

# bloco = horário, tipo, empresa, comercial, ação
BLOCK_SIZE = 5


@dataclass(frozen=True)
class BitrixEvent:
    entity_type: str
    account: str  # exatamente como aparece
    owner: str  # exatamente como aparece
    action_text: str
    category: str
    hhmm: str
    hour: int
    age_seconds: int  # desempate: maior = mais antigo
    index: int  # ordem no texto (desempate final)


@dataclass
class Extraction:
    anchor: str
    events: List[BitrixEvent] = field(default_factory=list)


def classify_action(action_text: str) -> str:
    norm = norm_key(action_text)
    for phrase, category in _ACTION_PHRASES:
        if phrase in norm:
            return category
    return OUTROS


def parse_entity_type(line: str) -> Optional[str]:
    norm = norm_key(line)
    if norm == "lead":
        return LEAD
    if norm == "negocio":
        return NEGOCIO
    return None


def split_lines(text: str) -> List[str]:
    return [ln.strip() for ln in _LINE_SPLIT_RE.split(text or "") if ln.strip()]


def extract_events(text: str, anchor_hhmm: str, start_index: int = 0) -> Extraction:
    """
    Varre a timeline colada do Bitrix e monta um evento por bloco de 5 linhas:

        hoje, 10:00
        negócio
        Acme Ltda
        Maria Silva
        Etapa alterada

    Se a janela que começa na linha i não fecha um bloco, tenta de novo em i+1
    (nunca pula 5), assim uma linha de ruído não faz perder o bloco seguinte.
    Linhas que não se encaixam são ignoradas sem erro.

    Levanta InvalidAnchorError antes de ler qualquer linha se o horário for inválido.
    """
    anchor = parse_anchor(anchor_hhmm)
    lines = split_lines(text)

    out = Extraction(anchor=seconds_to_hhmm(anchor))
    idx = start_index
    i = 0
    skipped = 0

    while i < len(lines):
        t = resolve_time_phrase(lines[i], anchor)
        if t is not None and i + BLOCK_SIZE - 1 < len(lines):
            entity = parse_entity_type(lines[i + 1])
            if entity:
                action_text = lines[i + 4]
                out.events.append(BitrixEvent(
                    entity_type=entity,
                    account=lines[i + 2],
                    owner=lines[i + 3],
                    action_text=action_text,
                    category=classify_action(action_text),
                    hhmm=t.hhmm,
                    hour=t.hour,
                    age_seconds=t.age_seconds,
                    index=idx,
                ))
                idx += 1
                i += BLOCK_SIZE
                continue
        skipped += 1
        i += 1

    logger.debug("Extração: %d eventos, %d linhas ignoradas", len(out.events), skipped)
    return out
