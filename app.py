import logging

import streamlit as st
import pandas as pd

from src.config import configure_logging
from src.db import CATEGORIES, DEFAULT_EMPRESAS, DEFAULT_LEADS, DEFAULT_SETTINGS
from src.db import is_configured, fetch_dashboard_settings, list_team_members
from src.helpers import CATEGORY_LABELS, format_brl, format_pct, team_chart, visible_members
from src.helpers import init_state, is_tv_mode, enable_tv_refresh
from ui.sidebar import render_sidebar_menu

st.set_page_config(page_title="Hype – Comercial", layout="wide")

configure_logging()
logger = logging.getLogger(__name__)

init_state()

st.session_state["current_page"] = "Dashboard"
render_sidebar_menu()

tv = is_tv_mode()
if tv:
    enable_tv_refresh()


@st.cache_data(ttl=30)
def load_dashboard():
    settings = fetch_dashboard_settings()
    members = {c: list_team_members(c) for c in CATEGORIES}
    return settings, members


# ----------------------------
# Dados (banco ou padrão)
# ----------------------------
if is_configured():
    try:
        settings, members = load_dashboard()
    except Exception as e:
        logger.exception("Falha ao carregar o dashboard")
        st.error("Não consegui carregar os dados do banco. Exibindo valores padrão.")
        if not tv:
            st.exception(e)
        settings, members = DEFAULT_SETTINGS, {"empresas": DEFAULT_EMPRESAS, "leads": DEFAULT_LEADS}
else:
    if not tv:
        st.warning("Banco não configurado: exibindo valores padrão (nada será salvo).")
    settings, members = DEFAULT_SETTINGS, {"empresas": DEFAULT_EMPRESAS, "leads": DEFAULT_LEADS}

st.title("Hype – Comercial")

# ----------------------------
# Metas
# ----------------------------
c1, c2, c3, c4 = st.columns(4)
c1.metric("Meta do mês", format_brl(settings["meta_mes"]))
c2.metric("Atingido no mês", format_brl(settings["atingido_mes"]),
          format_pct(settings["atingido_mes"], settings["meta_mes"]), delta_color="off")
c3.metric("Meta do dia", format_brl(settings["meta_dia"]))
c4.metric("Atingido no dia", format_brl(settings["atingido_dia"]),
          format_pct(settings["atingido_dia"], settings["meta_dia"]), delta_color="off")

for label, part, whole in (
    ("Mês", settings["atingido_mes"], settings["meta_mes"]),
    ("Dia", settings["atingido_dia"], settings["meta_dia"]),
):
    ratio = min(float(part or 0) / float(whole), 1.0) if whole else 0.0
    st.progress(ratio, text=f"{label}: {format_pct(part, whole)} da meta")

st.divider()

# ----------------------------
# Acionamentos por comercial
# ----------------------------
cols = st.columns(len(CATEGORIES))
for col, category in zip(cols, CATEGORIES):
    rows = visible_members(members[category])
    with col:
        total = sum(m["morning"] + m["afternoon"] for m in rows)
        st.subheader(f"{CATEGORY_LABELS[category]} • {total} acionamentos")
        if not rows:
            st.info("Nenhum colaborador cadastrado.")
            continue

        st.plotly_chart(team_chart(rows), use_container_width=True, key=f"chart_{category}")

        if not tv:
            df = pd.DataFrame(rows, columns=["name", "morning", "afternoon"])
            df["total"] = df["morning"] + df["afternoon"]
            df = df.sort_values("total", ascending=False).rename(columns={
                "name": "Colaborador", "morning": "Manhã", "afternoon": "Tarde", "total": "Total",
            })
            st.dataframe(df, use_container_width=True, hide_index=True)
