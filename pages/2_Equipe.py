import logging

import streamlit as st

from src.config import configure_logging
from src.db import CATEGORIES, is_configured
from src.db import fetch_dashboard_settings, update_dashboard_settings
from src.db import list_team_members, upsert_team_member, add_team_member, delete_team_member
from src.helpers import CATEGORY_LABELS, init_state
from ui.sidebar import render_sidebar_menu

st.set_page_config(page_title="Equipe e metas • Hype", layout="wide")

configure_logging()
logger = logging.getLogger(__name__)

init_state()

st.session_state["current_page"] = "Equipe e metas"
render_sidebar_menu()

st.header("Equipe e metas")

if not is_configured():
    st.warning("Banco não configurado. Defina a URL do banco para editar metas e equipe.")
    st.stop()


def saved(msg: str):
    # limpa caches do dashboard
    st.cache_data.clear()
    st.toast(msg, icon="✅")


# ============================================================
# Metas
# ============================================================

st.subheader("1) Metas")

try:
    settings = fetch_dashboard_settings()
except Exception as e:
    logger.exception("Falha ao carregar metas")
    st.error("Não consegui carregar as metas.")
    st.exception(e)
    st.stop()

with st.form("metas"):
    c1, c2, c3, c4 = st.columns(4)
    meta_mes = c1.number_input("Meta do mês (R$)", value=settings["meta_mes"], min_value=0.0, step=1000.0)
    atingido_mes = c2.number_input("Atingido no mês (R$)", value=settings["atingido_mes"], min_value=0.0, step=1000.0)
    meta_dia = c3.number_input("Meta do dia (R$)", value=settings["meta_dia"], min_value=0.0, step=1000.0)
    atingido_dia = c4.number_input("Atingido no dia (R$)", value=settings["atingido_dia"], min_value=0.0, step=1000.0)

    if st.form_submit_button("Salvar metas", type="primary"):
        try:
            update_dashboard_settings(
                meta_mes=meta_mes,
                atingido_mes=atingido_mes,
                meta_dia=meta_dia,
                atingido_dia=atingido_dia,
            )
            saved("Metas salvas!")
        except Exception as e:
            logger.exception("Falha ao salvar metas")
            st.error(f"Erro ao salvar metas: {e}")

st.divider()

# ============================================================
# Equipe
# ============================================================

st.subheader("2) Equipe")

for category in CATEGORIES:
    st.markdown(f"### {CATEGORY_LABELS[category]}")

    try:
        members = list_team_members(category)
    except Exception as e:
        logger.exception("Falha ao carregar equipe %s", category)
        st.error(f"Não consegui carregar {CATEGORY_LABELS[category].lower()}: {e}")
        continue

    for m in members:
        c_name, c_m, c_a, c_save, c_del = st.columns([3, 1, 1, 0.8, 0.8], vertical_alignment="bottom")
        name = c_name.text_input("Nome", value=m["name"], key=f"name_{m['id']}")
        morning = c_m.number_input("Manhã", value=m["morning"], min_value=0, step=1, key=f"m_{m['id']}")
        afternoon = c_a.number_input("Tarde", value=m["afternoon"], min_value=0, step=1, key=f"a_{m['id']}")

        if c_save.button("Salvar", key=f"save_{m['id']}", use_container_width=True):
            try:
                upsert_team_member({**m, "name": name.strip() or m["name"],
                                    "morning": morning, "afternoon": afternoon})
                saved(f"{name} salvo!")
            except Exception as e:
                logger.exception("Falha ao salvar membro %s", m["id"])
                st.error(f"Erro ao salvar {m['name']}: {e}")

        if c_del.button("Remover", key=f"del_{m['id']}", use_container_width=True):
            try:
                delete_team_member(m["id"])
            except Exception as e:
                logger.exception("Falha ao remover membro %s", m["id"])
                st.error(f"Erro ao remover {m['name']}: {e}")
            else:
                saved(f"{m['name']} removido.")
                st.rerun()

    if st.button(f"Adicionar em {CATEGORY_LABELS[category]}", key=f"add_{category}"):
        try:
            add_team_member(category)
        except Exception as e:
            logger.exception("Falha ao adicionar membro em %s", category)
            st.error(f"Erro ao adicionar: {e}")
        else:
            saved("Colaborador adicionado.")
            st.rerun()
