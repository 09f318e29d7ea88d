import streamlit as st

from src.helpers import is_tv_mode, set_tv_mode

PAGES = {
    "Dashboard": "app.py",
    "Logs Bitrix": "pages/1_Logs_Bitrix.py",
    "Equipe e metas": "pages/2_Equipe.py",
}

def render_sidebar_menu():
    with st.sidebar:
        options = list(PAGES.keys())

        current = st.session_state.get("current_page", "Dashboard")
        if current not in options:
            current = "Dashboard"

        st.sidebar.title("📌 Navegação")

        selected = st.radio(
            "Ir para:",
            options,
            index=options.index(current),
            key="nav_selected",
        )

        st.divider()
        tv = st.toggle("Modo TV", value=is_tv_mode(), help="Tela cheia, fontes grandes e atualização automática.")

    if tv != is_tv_mode():
        set_tv_mode(tv)
        st.rerun()

    if selected != current:
        st.session_state["current_page"] = selected
        st.switch_page(PAGES[selected])
