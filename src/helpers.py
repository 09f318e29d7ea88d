from __future__ import annotations
import streamlit as st
import pandas as pd
from typing import Optional, Dict, Any, List
import plotly.graph_objects as go
import streamlit.components.v1 as components

from src.bitrix_logs import ACTION_CATEGORIES
from src.config import tv_refresh_seconds
from src.ignored import default_ignore_list

# ============================================================
# Helpers: cores + tema dos gráficos
# ============================================================

# === Fonte única de cores ===
PERIOD_COLORS = {
    "manhã": "#F4B400",
    "tarde": "#1A73E8",
}

ACTION_COLORS = {
    "ETAPA_ALTERADA": "#7E57C2",
    "ATIVIDADE_CRIADA": "#2ECC71",
    "STATUS_ATIVIDADE_ALTERADA": "#FF9800",
    "CHAMADA_TELEFONICA": "#00BCD4",
    "OUTROS": "#B0BEC5",
}

CATEGORY_LABELS = {
    "empresas": "Empresas",
    "leads": "Leads",
}


def apply_plot_theme(
    fig: go.Figure,
    *,
    height: Optional[int] = None,
    margin: Optional[Dict[str, int]] = None,
    legend: Optional[Dict[str, Any]] = None,
    x_title: Optional[str] = None,
    y_title: Optional[str] = None,
    tickfont_size: int = 12,
    titlefont_size: int = 13,
) -> go.Figure:
    """
    Aplica um tema padrão (clean) nos gráficos Plotly do app.
    No modo TV as fontes ficam maiores.
    """
    if is_tv_mode():
        tickfont_size += 6
        titlefont_size += 6

    if margin is None:
        margin = dict(l=30, r=30, t=30, b=30)

    base_legend = dict(
        bgcolor="rgba(255,255,255,0.75)",
        bordercolor="rgba(0,0,0,0.08)",
        borderwidth=1,
        font=dict(size=tickfont_size - 1),
        title_text=None,
    )
    if legend:
        base_legend.update(legend)

    fig.update_layout(
        template="simple_white",
        margin=margin,
        font=dict(
            family="Inter, system-ui, -apple-system, Segoe UI, Roboto, Arial",
            size=tickfont_size,
            color="#223",
        ),
        legend=base_legend,
    )

    if height is not None:
        fig.update_layout(height=height)

    fig.update_xaxes(
        title_text=x_title if x_title is not None else fig.layout.xaxis.title.text,
        title_font=dict(size=titlefont_size),
        tickfont=dict(size=tickfont_size),
        showgrid=False,
        zeroline=False,
        ticks="outside",
    )

    fig.update_yaxes(
        title_text=y_title if y_title is not None else fig.layout.yaxis.title.text,
        title_font=dict(size=titlefont_size),
        tickfont=dict(size=tickfont_size),
        showgrid=True,
        gridcolor="rgba(0,0,0,0.06)",
        zeroline=False,
        ticks="outside",
    )

    return fig


def hourly_chart(hourly: pd.DataFrame) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=[f"{int(h):02d}h" for h in hourly["hora"]],
        y=hourly["acionamentos"],
        marker_color=PERIOD_COLORS["tarde"],
        text=hourly["acionamentos"],
        textposition="outside",
    ))
    return apply_plot_theme(fig, height=320, x_title="Hora", y_title="Acionamentos")


def team_chart(members: List[Dict[str, Any]]) -> go.Figure:
    """Barras empilhadas manhã/tarde por colaborador (maior total em cima)."""
    df = pd.DataFrame(members, columns=["name", "morning", "afternoon"])
    df["total"] = df["morning"] + df["afternoon"]
    df = df.sort_values("total", ascending=True)

    fig = go.Figure()
    fig.add_bar(y=df["name"], x=df["morning"], name="Manhã", orientation="h",
                marker_color=PERIOD_COLORS["manhã"])
    fig.add_bar(y=df["name"], x=df["afternoon"], name="Tarde", orientation="h",
                marker_color=PERIOD_COLORS["tarde"])
    fig.update_layout(barmode="stack")
    return apply_plot_theme(
        fig,
        height=max(220, 48 * len(df) + 80),
        legend=dict(orientation="h", y=1.08, x=0),
    )


def actions_chart(actions: pd.DataFrame) -> go.Figure:
    """Ações por comercial, empilhadas por categoria."""
    fig = go.Figure()
    for cat in ACTION_CATEGORIES:
        fig.add_bar(x=actions["comercial"], y=actions[cat], name=cat,
                    marker_color=ACTION_COLORS[cat])
    fig.update_layout(barmode="stack")
    return apply_plot_theme(fig, height=360, legend=dict(orientation="h", y=1.12, x=0))


# ============================================================
# Formatação pt-BR
# ============================================================

def format_brl(value: float | None) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    s = f"{float(value or 0):,.2f}"
    return "R$ " + s.replace(",", "_").replace(".", ",").replace("_", ".")


def format_pct(part: float | None, whole: float | None) -> str:
    if not whole:
        return "0,0%"
    return f"{100 * float(part or 0) / float(whole):.1f}%".replace(".", ",")


def visible_members(members: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Remove colaboradores ignorados também da exibição."""
    ignored = default_ignore_list()
    return [m for m in members if m["name"] not in ignored]


# ============================================================
# Estado (session_state)
# ============================================================

BITRIX_KEYS = {
    "step": "bitrix_step",
    "anchor": "bitrix_anchor",
    "negocios": "bitrix_negocios",
    "leads": "bitrix_leads",
    "result": "bitrix_result",
    "applied": "bitrix_applied",
}


def init_state():
    st.session_state.setdefault(BITRIX_KEYS["step"], 1)
    st.session_state.setdefault(BITRIX_KEYS["anchor"], "")
    st.session_state.setdefault(BITRIX_KEYS["negocios"], "")
    st.session_state.setdefault(BITRIX_KEYS["leads"], "")
    st.session_state.setdefault(BITRIX_KEYS["result"], None)
    st.session_state.setdefault(BITRIX_KEYS["applied"], False)


def reset_bitrix_state():
    """Callback do botão Recomeçar."""
    st.session_state[BITRIX_KEYS["step"]] = 1
    st.session_state[BITRIX_KEYS["anchor"]] = ""
    st.session_state[BITRIX_KEYS["negocios"]] = ""
    st.session_state[BITRIX_KEYS["leads"]] = ""
    st.session_state[BITRIX_KEYS["result"]] = None
    st.session_state[BITRIX_KEYS["applied"]] = False


def is_tv_mode() -> bool:
    # fica na URL (?tv=1) para sobreviver ao reload automático
    return st.query_params.get("tv") == "1"


def set_tv_mode(enabled: bool):
    if enabled:
        st.query_params["tv"] = "1"
    else:
        st.query_params.pop("tv", None)


def enable_tv_refresh():
    """Modo TV: recarrega a página periodicamente para pegar os números novos."""
    components.html(
        f"<script>setTimeout(() => window.parent.location.reload(), {tv_refresh_seconds() * 1000});</script>",
        height=0,
    )
    st.markdown(
        """
        <style>
          [data-testid="stMetricValue"] { font-size: 3rem; }
          [data-testid="stMetricLabel"] { font-size: 1.4rem; }
          .block-container { max-width: none; padding-top: 1rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )
