"""
Trade Backtesting Tracker - Streamlit Dashboard

Log TP/SL outcomes with one click and review the statistics.
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import logging

from core.storage import StorageError, create_store
from journal.ledger import LedgerStore, LedgerValidationError, validate_magnitude
from journal.analytics import TradeAnalytics
from journal.export import records_to_csv
from journal.models import Decision, format_number
from config import ui_config

# Setup logging
logging.basicConfig(level=ui_config.log_level.upper())
logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title=ui_config.page_title,
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

GREEN = "#22c55e"
RED = "#ef4444"
BLUE = "#3b82f6"


@st.cache_resource
def initialize_system():
    """Initialize the ledger (cached for the server process)."""
    return LedgerStore(create_store())


def _inputs_ready(tp: str, sl: str) -> bool:
    """Both fields must hold valid magnitudes before a decision can be logged."""
    try:
        validate_magnitude(tp, "Take profit")
        validate_magnitude(sl, "Stop loss")
    except LedgerValidationError:
        return False
    return True


def _run(action, *args):
    """Apply a ledger mutation, warning instead of failing if it was not saved."""
    try:
        return action(*args)
    except LedgerValidationError as e:
        st.session_state["flash"] = ("error", str(e))
    except StorageError as e:
        logger.error(f"Ledger change not saved: {e}")
        st.session_state["flash"] = ("warning", f"Change kept for this session but not saved: {e}")
    return None


def _signed(value: float) -> str:
    return f"{'+' if value >= 0 else ''}{format_number(round(value, 2))}"


def _display(value, suffix: str = "", digits: int = 2) -> str:
    if value is None:
        return "N/A"
    if value == float("inf"):
        return "∞"
    return f"{value:.{digits}f}{suffix}"


def render_header():
    """Render page header."""
    st.title(f"📊 {ui_config.page_title}")

    # Messages from the previous run survive st.rerun()
    flash = st.session_state.pop("flash", None)
    if flash:
        level, message = flash
        getattr(st, level)(message)

    st.markdown("---")


def render_statistics(metrics):
    """Render the headline statistics row."""
    if metrics['total_trades'] == 0:
        return

    st.subheader("Statistics")
    cols = st.columns(8)
    cols[0].metric("Total Trades", metrics['total_trades'])
    cols[1].metric("Yes Decisions", metrics['wins'])
    cols[2].metric("No Decisions", metrics['losses'])
    cols[3].metric("Total Net", _signed(metrics['total_net']))
    cols[4].metric("Total Wins", format_number(round(metrics['wins_amount'], 2)))
    cols[5].metric("Total Losses", format_number(round(metrics['losses_amount'], 2)))
    cols[6].metric("Win Rate", _display(metrics['win_rate'], "%", 1))
    cols[7].metric("Avg Net", _display(metrics['avg_net']))


def render_entry_form(ledger: LedgerStore):
    """TP/SL inputs and the Yes/No buttons."""
    col_tp, col_sl, col_yes, col_no = st.columns([2, 2, 1, 1])

    with col_tp:
        tp = st.text_input("TP (Take Profit)", key="tp_input", placeholder="TP")
    with col_sl:
        sl = st.text_input("SL (Stop Loss)", key="sl_input", placeholder="SL")

    ready = _inputs_ready(tp, sl)

    with col_yes:
        st.write("")
        if st.button("Yes", key="yes_button", type="primary", disabled=not ready,
                     use_container_width=True):
            _run(ledger.append, Decision.WIN, tp, sl)
            _reset_inputs()
    with col_no:
        st.write("")
        if st.button("No", disabled=not ready, use_container_width=True):
            _run(ledger.append, Decision.LOSS, tp, sl)
            _reset_inputs()


def _reset_inputs():
    for key in ("tp_input", "sl_input"):
        st.session_state.pop(key, None)
    st.rerun()


def render_history(analytics: TradeAnalytics):
    """Newest trades first."""
    history = analytics.trade_history()
    if history.empty:
        st.info("No trades logged yet. Enter TP and SL, then pick Yes or No.")
        return

    display_df = history.head(ui_config.max_history_rows).copy()
    display_df['time'] = display_df['time'].apply(lambda t: t.strftime("%Y-%m-%d %H:%M:%S"))
    display_df['result'] = display_df['result'].apply(_signed)
    display_df = display_df.rename(columns={
        'time': 'Time',
        'decision': 'Decision',
        'tp': 'TP',
        'sl': 'SL',
        'result': 'Result',
    }).drop(columns=['id'])

    st.dataframe(display_df, use_container_width=True, hide_index=True)


def render_controls(ledger: LedgerStore, csv_text: str):
    """Clear, remove-last and export buttons."""
    empty = len(ledger.records) == 0
    col1, col2, col3 = st.columns(3)

    with col1:
        confirm = st.checkbox("Confirm clear", key="confirm_clear", disabled=empty)
        if st.button("Clear", disabled=empty or not confirm, use_container_width=True):
            _run(ledger.clear)
            st.session_state.pop("confirm_clear", None)
            st.rerun()
    with col2:
        confirm_remove = st.checkbox("Confirm remove", key="confirm_remove", disabled=empty)
        if st.button("Remove last", key="remove_last_button",
                     disabled=empty or not confirm_remove, use_container_width=True):
            _run(ledger.remove_last)
            st.session_state.pop("confirm_remove", None)
            st.rerun()
    with col3:
        st.download_button(
            "Export CSV",
            data=csv_text,
            file_name="records.csv",
            mime="text/csv",
            disabled=empty,
            use_container_width=True,
        )


def render_capital(ledger: LedgerStore, metrics):
    """Starting capital input with current balance."""
    st.sidebar.header("💰 Account")
    value = st.sidebar.number_input(
        "Starting Capital",
        min_value=0.0,
        value=float(ledger.starting_capital),
        step=1000.0,
    )
    if value != ledger.starting_capital:
        _run(ledger.set_starting_capital, value)
        st.rerun()

    st.sidebar.metric(
        "Current Balance",
        f"${metrics['current_balance']:,.2f}",
        f"{_signed(metrics['total_profit'])} ({_display(metrics['total_return_pct'], '%')})",
    )


def render_equity_chart(equity: pd.DataFrame):
    fig = go.Figure(go.Scatter(
        x=equity['trade'], y=equity['balance'],
        mode="lines", line={'color': BLUE, 'width': 2}, name="Balance",
        customdata=equity['date'].astype(str),
        hovertemplate="Trade %{x}<br>Balance %{y:,.2f}<br>%{customdata}<extra></extra>",
    ))
    fig.update_layout(title="Equity Curve", xaxis_title="Trade #",
                      yaxis_title="Balance", height=ui_config.chart_height)
    st.plotly_chart(fig, use_container_width=True)


def render_drawdown_chart(drawdown: pd.DataFrame, max_drawdown: float):
    fig = go.Figure(go.Scatter(
        x=drawdown['trade'], y=drawdown['drawdown'],
        mode="lines", fill="tozeroy", line={'color': RED, 'width': 2}, name="Drawdown",
    ))
    fig.update_layout(title=f"Drawdown Analysis (max {max_drawdown:.2f}%)",
                      xaxis_title="Trade #", yaxis_title="Drawdown (%)",
                      height=ui_config.chart_height)
    st.plotly_chart(fig, use_container_width=True)


def render_distribution_chart(distribution):
    fig = go.Figure(go.Pie(
        labels=["Wins", "Losses"],
        values=[distribution['wins']['count'], distribution['losses']['count']],
        marker={'colors': [GREEN, RED]},
    ))
    fig.update_layout(title="Win/Loss Distribution", height=ui_config.chart_height)
    st.plotly_chart(fig, use_container_width=True)


def render_monthly_chart(monthly: pd.DataFrame):
    colors = [GREEN if p >= 0 else RED for p in monthly['profit']]
    fig = go.Figure(go.Bar(x=monthly['month'], y=monthly['profit'], marker_color=colors))
    fig.update_layout(title="Monthly Performance", yaxis_title="Profit",
                      height=ui_config.chart_height)
    st.plotly_chart(fig, use_container_width=True)


def render_analytics(analytics: TradeAnalytics, metrics):
    """Charts and ratios."""
    if metrics['total_trades'] == 0:
        st.info("No trades to analyze yet.")
        return

    drawdown, max_drawdown = analytics.drawdown_curve()
    distribution = analytics.win_loss_distribution()

    render_equity_chart(analytics.equity_curve())
    render_drawdown_chart(drawdown, max_drawdown)

    col1, col2 = st.columns(2)
    with col1:
        render_distribution_chart(distribution)
        st.markdown(
            f"**Total Wins:** ${distribution['wins']['amount']:,.2f}  \n"
            f"**Total Losses:** ${distribution['losses']['amount']:,.2f}"
        )
    with col2:
        render_monthly_chart(analytics.monthly_performance())

    st.subheader("Key Metrics")
    cols = st.columns(6)
    cols[0].metric("Avg Win", _display(metrics['avg_win']))
    cols[1].metric("Avg Loss", _display(metrics['avg_loss']))
    cols[2].metric("Profit Factor", _display(metrics['profit_factor']))
    cols[3].metric("Best Win", _display(metrics['best_win']))
    cols[4].metric("Worst Loss", _display(metrics['worst_loss']))
    cols[5].metric("Risk/Reward", _display(metrics['risk_reward']))

    with st.expander("Performance Report"):
        st.text(analytics.generate_report())


def main():
    """Main app function."""
    render_header()

    ledger = initialize_system()
    analytics = TradeAnalytics(ledger.state)
    metrics = analytics.calculate_performance_metrics()

    render_capital(ledger, metrics)

    tab1, tab2 = st.tabs(["📓 Tracker", "📈 Analytics"])

    with tab1:
        render_statistics(metrics)
        st.markdown("---")
        render_entry_form(ledger)
        st.markdown("---")
        render_history(analytics)
        render_controls(ledger, records_to_csv(ledger.records))

    with tab2:
        render_analytics(analytics, metrics)


if __name__ == "__main__":
    main()
