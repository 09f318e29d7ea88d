from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List

import streamlit as st
import psycopg2
from psycopg2.extras import RealDictCursor

from src.config import database_url

logger = logging.getLogger(__name__)

CATEGORIES = ("empresas", "leads")
SETTINGS_KEY = "default"

# Defaults atuais do app (primeiro uso / seed)
DEFAULT_SETTINGS = {
    "meta_mes": 15800000.0,
    "meta_dia": 1053333.33,
    "atingido_mes": 5556931.1,
    "atingido_dia": 292434.31,
}

DEFAULT_EMPRESAS = [
    {"id": "1", "category": "empresas", "name": "Alessandra Youssef", "morning": 29, "afternoon": 0},
    {"id": "2", "category": "empresas", "name": "Luciane Mariani", "morning": 23, "afternoon": 0},
    {"id": "3", "category": "empresas", "name": "Samara de Ramos", "morning": 9, "afternoon": 0},
    {"id": "4", "category": "empresas", "name": "Rodrigo Mariani", "morning": 4, "afternoon": 0},
    {"id": "5", "category": "empresas", "name": "Bruna Domingos", "morning": 3, "afternoon": 0},
    {"id": "6", "category": "empresas", "name": "Raissa Flor", "morning": 1, "afternoon": 0},
]

DEFAULT_LEADS = [
    {"id": "l1", "category": "leads", "name": "Sabrina Fulas", "morning": 45, "afternoon": 0},
    {"id": "l2", "category": "leads", "name": "Nayad Souza", "morning": 41, "afternoon": 0},
    {"id": "l3", "category": "leads", "name": "Caio Zapelini", "morning": 14, "afternoon": 0},
    {"id": "l4", "category": "leads", "name": "Alana Silveira", "morning": 16, "afternoon": 0},
]


class DatabaseNotConfigured(RuntimeError):
    def __init__(self) -> None:
        super().__init__(
            "Banco não configurado. Defina [database] url em .streamlit/secrets.toml ou DATABASE_URL."
        )


def is_configured() -> bool:
    return database_url() is not None


@st.cache_resource
def get_conn():
    """
    Abre uma conexão persistente com o PostgreSQL (Supabase).
    cache_resource evita abrir conexão a cada rerun do Streamlit.
    """
    url = database_url()
    if url is None:
        raise DatabaseNotConfigured()

    conn = psycopg2.connect(url, cursor_factory=RealDictCursor)
    # muitas leituras e reruns: evita ficar preso em transações abertas
    conn.autocommit = True
    return conn


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except psycopg2.Error:
        logger.warning("Rollback falhou (conexão possivelmente fechada)")


def fetch_df(sql: str, params=None) -> List[Dict[str, Any]]:
    """
    Executa SELECT e retorna lista de dicts (bom para virar DataFrame).
    Se a query falhar, faz rollback para não "quebrar" a conexão cacheada.
    """
    conn = get_conn()
    try:
        with conn.cursor() as cur:
            cur.execute(sql, params or {})
            return cur.fetchall()
    except Exception:
        logger.exception("Falha na consulta")
        _rollback(conn)
        raise


def execute(sql: str, params=None) -> int:
    conn = get_conn()
    try:
        with conn.cursor() as cur:
            cur.execute(sql, params or {})
            return cur.rowcount
    except Exception:
        logger.exception("Falha ao executar comando")
        _rollback(conn)
        raise


# ============================================================
# dashboard_settings
# ============================================================

def fetch_dashboard_settings() -> Dict[str, float]:
    rows = fetch_df(
        """
        select meta_mes, meta_dia, atingido_mes, atingido_dia
        from public.dashboard_settings
        where key = %(key)s;
        """,
        {"key": SETTINGS_KEY},
    )
    if not rows:
        execute(
            """
            insert into public.dashboard_settings (key, meta_mes, meta_dia, atingido_mes, atingido_dia)
            values (%(key)s, %(meta_mes)s, %(meta_dia)s, %(atingido_mes)s, %(atingido_dia)s)
            on conflict (key) do nothing;
            """,
            {"key": SETTINGS_KEY, **DEFAULT_SETTINGS},
        )
        return dict(DEFAULT_SETTINGS)

    row = rows[0]
    return {k: float(row.get(k) or 0) for k in DEFAULT_SETTINGS}


def update_dashboard_settings(**patch: float) -> None:
    payload = {k: float(v) for k, v in patch.items() if k in DEFAULT_SETTINGS and v is not None}
    if not payload:
        return
    sets = ", ".join(f"{k} = %({k})s" for k in payload)
    execute(
        f"update public.dashboard_settings set {sets} where key = %(key)s;",
        {"key": SETTINGS_KEY, **payload},
    )


# ============================================================
# team_members
# ============================================================

def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValueError(f"Categoria inválida: {category}")


def list_team_members(category: str) -> List[Dict[str, Any]]:
    """Lista membros da categoria ordenados por nome; se estiver vazia, grava o seed padrão."""
    _check_category(category)
    rows = fetch_df(
        """
        select id, category, name, morning, afternoon
        from public.team_members
        where category = %(category)s
        order by name;
        """,
        {"category": category},
    )
    members = [
        {
            "id": str(r["id"]),
            "category": r.get("category") or category,
            "name": str(r.get("name") or ""),
            "morning": int(r.get("morning") or 0),
            "afternoon": int(r.get("afternoon") or 0),
        }
        for r in rows
    ]
    if members:
        return members

    seed = DEFAULT_EMPRESAS if category == "empresas" else DEFAULT_LEADS
    for m in seed:
        upsert_team_member(m)
    return [dict(m) for m in seed]


def upsert_team_member(member: Dict[str, Any]) -> None:
    _check_category(member["category"])
    execute(
        """
        insert into public.team_members (id, category, name, morning, afternoon)
        values (%(id)s, %(category)s, %(name)s, %(morning)s, %(afternoon)s)
        on conflict (id) do update set
          category = excluded.category,
          name = excluded.name,
          morning = excluded.morning,
          afternoon = excluded.afternoon;
        """,
        {
            "id": str(member["id"]),
            "category": member["category"],
            "name": member["name"],
            "morning": int(member.get("morning") or 0),
            "afternoon": int(member.get("afternoon") or 0),
        },
    )


def add_team_member(category: str) -> Dict[str, Any]:
    member = {
        "id": str(uuid.uuid4()),
        "category": category,
        "name": "Novo Colaborador",
        "morning": 0,
        "afternoon": 0,
    }
    upsert_team_member(member)
    return member


def delete_team_member(member_id: str) -> None:
    execute("delete from public.team_members where id = %(id)s;", {"id": str(member_id)})
