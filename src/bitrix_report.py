from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from src.bitrix_logs import ACTION_CATEGORIES, NEGOCIO, BitrixEvent, extract_events
from src.ignored import IgnoreList, default_ignore_list
from src.text import account_key, norm_key

logger = logging.getLogger(__name__)

HOURLY_TITLE = "Acionamentos por hora (total geral)"


@dataclass
class UniqueRow:
    owner: str
    entity_type: str
    morning: int = 0
    afternoon: int = 0


@dataclass
class ActionRow:
    owner: str
    counts: Dict[str, int] = field(default_factory=lambda: {c: 0 for c in ACTION_CATEGORIES})


@dataclass
class BitrixReport:
    hourly_counts: Dict[int, int] = field(default_factory=dict)
    unique_summary: List[UniqueRow] = field(default_factory=list)
    action_summary: List[ActionRow] = field(default_factory=list)


@dataclass
class ReportResult:
    text: str
    events_count: int
    report: BitrixReport
    anchor: str


def _is_older(candidate: BitrixEvent, current: BitrixEvent) -> bool:
    if candidate.age_seconds != current.age_seconds:
        return candidate.age_seconds > current.age_seconds
    return candidate.index < current.index


def _owner_sort_key(name: str) -> str:
    # equivalente ao localeCompare pt-BR com sensitivity "base": ignora caixa e acento
    return norm_key(name)


def filter_ignored(events: Iterable[BitrixEvent], ignored: Optional[IgnoreList] = None) -> List[BitrixEvent]:
    ignored = ignored if ignored is not None else default_ignore_list()
    return [e for e in events if e.owner not in ignored]


def build_report(events: Iterable[BitrixEvent], ignored: Optional[IgnoreList] = None) -> BitrixReport:
    """
    Agrega os eventos em três resumos:

    - acionamentos por hora (todos os eventos);
    - empresas únicas por comercial/tipo, manhã (até 11h) e tarde, contando cada
      (comercial, tipo, empresa) uma vez pelo registro mais antigo;
    - ações por comercial (todos os eventos, sem deduplicar).
    """
    events = filter_ignored(events, ignored)
    report = BitrixReport()

    for e in events:
        report.hourly_counts[e.hour] = report.hourly_counts.get(e.hour, 0) + 1

    # nome exibido = primeira grafia encontrada
    display: Dict[str, str] = {}
    oldest: Dict[Tuple[str, str, str], BitrixEvent] = {}
    actions: Dict[str, ActionRow] = {}

    for e in events:
        owner_key = norm_key(e.owner)
        display.setdefault(owner_key, e.owner)

        key = (owner_key, e.entity_type, account_key(e.account))
        current = oldest.get(key)
        if current is None or _is_older(e, current):
            oldest[key] = e

        row = actions.setdefault(owner_key, ActionRow(owner=display[owner_key]))
        row.counts[e.category] += 1

    unique: Dict[Tuple[str, str], UniqueRow] = {}
    for (owner_key, entity_type, _), e in oldest.items():
        row = unique.setdefault((owner_key, entity_type), UniqueRow(display[owner_key], entity_type))
        if e.hour <= 11:
            row.morning += 1
        else:
            row.afternoon += 1

    report.unique_summary = sorted(
        unique.values(),
        key=lambda r: (_owner_sort_key(r.owner), 0 if r.entity_type == NEGOCIO else 1),
    )
    report.action_summary = sorted(actions.values(), key=lambda r: _owner_sort_key(r.owner))
    return report


def format_report(report: BitrixReport) -> str:
    lines: List[str] = [HOURLY_TITLE, ""]

    for hour in sorted(h for h, n in report.hourly_counts.items() if n > 0):
        lines.append(f"{hour:02d}: {report.hourly_counts[hour]}")

    lines += ["", ""]

    for r in report.unique_summary:
        lines += [
            f"{r.owner} — {r.entity_type}",
            f"Manhã: {r.morning} empresas únicas",
            f"Tarde: {r.afternoon} empresas únicas",
            "",
        ]
    if report.unique_summary:
        lines.append("")

    for r in report.action_summary:
        lines.append(r.owner)
        lines += [f"{c}: {r.counts.get(c, 0)}" for c in ACTION_CATEGORIES]
        lines.append("")

    return "\n".join(lines).rstrip()


def parse_and_build_report(
    anchor_hhmm: str,
    negocios_text: str,
    leads_text: str,
    ignored: Optional[IgnoreList] = None,
) -> ReportResult:
    """Lê as duas levas (negócios, depois leads), agrega e formata o relatório."""
    negocios = extract_events(negocios_text, anchor_hhmm, 0)
    leads = extract_events(leads_text, anchor_hhmm, len(negocios.events))

    events = filter_ignored(negocios.events + leads.events, ignored)
    report = build_report(events, ignored)

    logger.info(
        "Relatório Bitrix: %d negócios + %d leads lidos, %d válidos (âncora %s)",
        len(negocios.events), len(leads.events), len(events), negocios.anchor,
    )
    return ReportResult(
        text=format_report(report),
        events_count=len(events),
        report=report,
        anchor=negocios.anchor,
    )


def report_frames(report: BitrixReport) -> Dict[str, pd.DataFrame]:
    """Tabelas do relatório para exibição/gráfico."""
    hourly = pd.DataFrame(
        sorted(report.hourly_counts.items()),
        columns=["hora", "acionamentos"],
    )
    unique = pd.DataFrame(
        [
            {
                "comercial": r.owner,
                "tipo": r.entity_type,
                "manhã": r.morning,
                "tarde": r.afternoon,
                "total": r.morning + r.afternoon,
            }
            for r in report.unique_summary
        ],
        columns=["comercial", "tipo", "manhã", "tarde", "total"],
    )
    actions = pd.DataFrame(
        [{"comercial": r.owner, **r.counts} for r in report.action_summary],
        columns=["comercial", *ACTION_CATEGORIES],
    )
    return {"hourly": hourly, "unique": unique, "actions": actions}
