from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from psycopg2.extras import execute_values

from src.bitrix_logs import LEAD, NEGOCIO
from src.bitrix_report import BitrixReport
from src.db import get_conn, list_team_members
from src.text import norm_key

logger = logging.getLogger(__name__)

ENTITY_TO_CATEGORY = {
    NEGOCIO: "empresas",
    LEAD: "leads",
}

TEAM_COLUMNS = ["id", "category", "name", "morning", "afternoon"]


def report_to_team_rows(
    report: BitrixReport,
    existing: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Converte o resumo de empresas únicas em linhas de team_members.

    NEGÓCIO -> empresas, LEAD -> leads. Quem já existe na categoria (mesmo nome
    normalizado) mantém o id; comercial novo ganha um uuid. Manhã/tarde são
    sobrescritos com as contagens do relatório.
    """
    by_key = {
        (m["category"], norm_key(m["name"])): m
        for m in (existing or [])
    }

    rows = []
    for r in report.unique_summary:
        category = ENTITY_TO_CATEGORY[r.entity_type]
        current = by_key.get((category, norm_key(r.owner)))
        rows.append({
            "id": str(current["id"]) if current else str(uuid.uuid4()),
            "category": category,
            "name": current["name"] if current else r.owner,
            "morning": r.morning,
            "afternoon": r.afternoon,
        })
    return rows


def upsert_team_rows(rows: List[Dict[str, Any]]) -> int:
    if not rows:
        return 0

    values = [tuple(r[c] for c in TEAM_COLUMNS) for r in rows]

    sql = """
    INSERT INTO public.team_members (id, category, name, morning, afternoon)
    VALUES %s
    ON CONFLICT (id) DO UPDATE SET
        morning = EXCLUDED.morning,
        afternoon = EXCLUDED.afternoon;
    """

    conn = get_conn()
    try:
        with conn.cursor() as cur:
            execute_values(cur, sql, values, page_size=500)
    except Exception:
        logger.exception("Falha ao gravar %d membros", len(rows))
        try:
            conn.rollback()
        except Exception:
            logger.warning("Rollback falhou após erro no upsert")
        raise
    return len(values)


def apply_report_to_team(report: BitrixReport) -> int:
    """Aplica o relatório Bitrix no dashboard (contadores manhã/tarde por comercial)."""
    existing = []
    for category in ENTITY_TO_CATEGORY.values():
        existing.extend(list_team_members(category))

    rows = report_to_team_rows(report, existing)
    written = upsert_team_rows(rows)
    logger.info("Relatório aplicado no dashboard: %d membros atualizados", written)
    return written
