import logging

import streamlit as st

from src.bitrix_report import parse_and_build_report, report_frames
from src.bitrix_time import INVALID_ANCHOR_MSG, InvalidAnchorError, normalize_hhmm
from src.config import configure_logging
from src.db import is_configured
from src.helpers import BITRIX_KEYS, init_state, reset_bitrix_state, is_tv_mode
from src.helpers import hourly_chart, actions_chart
from src.ingest import apply_report_to_team
from ui.sidebar import render_sidebar_menu

st.set_page_config(page_title="Logs Bitrix • Hype", layout="wide")

configure_logging()
logger = logging.getLogger(__name__)

init_state()

st.session_state["current_page"] = "Logs Bitrix"
render_sidebar_menu()

K = BITRIX_KEYS
step = st.session_state[K["step"]]


def apply_to_dashboard(report):
    """Falha aqui não invalida o relatório: ele continua na tela para copiar."""
    try:
        with st.spinner("Aplicando no dashboard…"):
            written = apply_report_to_team(report)
    except Exception as e:
        logger.exception("Falha ao aplicar relatório no dashboard")
        st.session_state[K["applied"]] = False
        st.toast("Falha ao aplicar no dashboard", icon="❌")
        st.error(f"Falha ao aplicar no dashboard: {e}")
        return
    st.session_state[K["applied"]] = True
    st.cache_data.clear()
    st.toast(f"Relatório aplicado no dashboard ({written} comerciais)", icon="✅")


# ============================================================
# Cabeçalho
# ============================================================

with st.container(border=True):
    c_title, c_btn = st.columns([4, 1], vertical_alignment="center")
    with c_title:
        st.subheader("Análise de Logs (Bitrix)")
        st.caption(
            "Cole os logs em texto corrido (hoje, ontem ou vários dias). "
            "O relatório só é gerado após receber as 2 levas."
        )
    with c_btn:
        st.button("Recomeçar", on_click=reset_bitrix_state, use_container_width=True)

# ============================================================
# ETAPA 1: horário atual
# ============================================================

with st.container(border=True):
    st.caption("ETAPA 1")
    st.markdown("**Me informe o horário atual para prosseguir com a análise.**")

    c_time, c_ok = st.columns([1, 3], vertical_alignment="bottom")
    with c_time:
        anchor = st.text_input("Horário atual (HH:MM)", placeholder="15:45",
                               key=K["anchor"], disabled=step != 1)
    with c_ok:
        if st.button("Confirmar horário", disabled=step != 1, type="primary"):
            normalized = normalize_hhmm(anchor)
            if normalized is None:
                st.error(INVALID_ANCHOR_MSG)
            else:
                st.session_state[K["step"]] = 2
                st.session_state[K["result"]] = None
                st.rerun()

# ============================================================
# ETAPA 2: negócios
# ============================================================

with st.container(border=True):
    st.caption("ETAPA 2")
    st.markdown("**Envie agora a 1ª leva: LOGS DE NEGÓCIOS.**")
    st.caption("Aceita logs de hoje, ontem ou datas anteriores. Todos serão combinados no relatório.")

    negocios = st.text_area("Logs de negócios", placeholder="Cole aqui os logs de NEGÓCIOS...",
                            height=180, key=K["negocios"], disabled=step != 2,
                            label_visibility="collapsed")
    if st.button("Confirmar 1ª leva", disabled=step != 2 or not negocios.strip()):
        st.session_state[K["step"]] = 3
        st.session_state[K["result"]] = None
        st.rerun()

# ============================================================
# ETAPA 3: leads + geração
# ============================================================

with st.container(border=True):
    st.caption("ETAPA 3")
    st.markdown("**Recebido. Envie agora a 2ª leva: LOGS DE LEADS.**")
    st.caption("Aceita logs de hoje, ontem ou datas anteriores. Todos serão combinados no relatório.")

    leads = st.text_area("Logs de leads", placeholder="Cole aqui os logs de LEADS...",
                         height=180, key=K["leads"], disabled=step != 3,
                         label_visibility="collapsed")

    if st.button("Gerar relatório completo", disabled=step != 3 or not leads.strip(), type="primary"):
        try:
            result = parse_and_build_report(anchor, negocios, leads)
        except InvalidAnchorError as e:
            st.error(str(e))
            st.stop()

        st.session_state[K["result"]] = result
        st.session_state[K["applied"]] = False

        # aplica automaticamente quando o banco está disponível
        if is_configured():
            apply_to_dashboard(result.report)

# ============================================================
# Resultado
# ============================================================

result = st.session_state[K["result"]]
if result is None:
    st.stop()

with st.container(border=True):
    c_res, c_apply = st.columns([4, 1], vertical_alignment="center")
    with c_res:
        st.subheader("Resultado")
        applied = " • aplicado" if st.session_state[K["applied"]] else ""
        st.caption(f"{result.events_count} eventos válidos (âncora {result.anchor}){applied}. "
                   "Contagens determinísticas, sem interpretações subjetivas.")
    with c_apply:
        if st.button(
            "Aplicado" if st.session_state[K["applied"]] else "Aplicar no dashboard",
            disabled=not is_configured(),
            use_container_width=True,
        ):
            apply_to_dashboard(result.report)

    # st.code já traz o botão de copiar
    st.code(result.text, language=None)

frames = report_frames(result.report)

if not frames["hourly"].empty:
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("**Acionamentos por hora**")
        st.plotly_chart(hourly_chart(frames["hourly"]), use_container_width=True)
    with c2:
        st.markdown("**Ações por comercial**")
        st.plotly_chart(actions_chart(frames["actions"]), use_container_width=True)

if not is_tv_mode():
    with st.expander("Tabelas", expanded=False):
        st.dataframe(frames["unique"], use_container_width=True, hide_index=True)
        st.dataframe(frames["actions"], use_container_width=True, hide_index=True)
