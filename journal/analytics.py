"""
Trade analytics - analyze your performance.

Every view is recomputed from the full ledger on each call. Ledgers are
small and recomputing keeps the numbers consistent with what is stored.
"""
import math
import pandas as pd
import numpy as np
from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime
import logging

from .models import LedgerState, TradeRecord, format_number

logger = logging.getLogger(__name__)

MONTH_FORMAT = "%b %Y"

_COLUMNS = ['id', 'decision', 'tp', 'sl', 'timestamp', 'is_win', 'result']


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is zero."""
    if denominator == 0:
        return None
    return numerator / denominator


class TradeAnalytics:
    """
    Derive statistics and time series from a ledger snapshot.

    Metrics tracked:
    - Equity curve and drawdown
    - Win/loss counts and totals
    - Monthly profit
    - Win rate, averages, profit factor, risk/reward

    Undefined values (0/0 and friends) are returned as None.
    """

    def __init__(self, state: LedgerState):
        """
        Initialize with a ledger snapshot.

        Args:
            state: LedgerState from LedgerStore.state
        """
        self.starting_capital = float(state.starting_capital)
        self.records: List[TradeRecord] = list(state.records)
        self.df = self._build_frame(self.records)

        logger.debug(f"TradeAnalytics initialized with {len(self.df)} trades")

    @staticmethod
    def _build_frame(records: List[TradeRecord]) -> pd.DataFrame:
        rows = [{
            'id': r.id,
            'decision': r.decision.value,
            'tp': float(r.take_profit),
            'sl': float(r.stop_loss),
            'timestamp': r.timestamp,
            'is_win': r.is_win,
            'result': float(r.signed_result),
        } for r in records]
        frame = pd.DataFrame(rows, columns=_COLUMNS)
        return frame.astype({'id': 'int64', 'tp': float, 'sl': float,
                             'timestamp': 'int64', 'is_win': bool, 'result': float})

    def _balances(self) -> pd.Series:
        return self.starting_capital + self.df['result'].cumsum()

    # ------------------------------------------------------------------
    # Time series
    # ------------------------------------------------------------------

    def equity_curve(self) -> pd.DataFrame:
        """
        Running balance after each trade, in entry order.

        Returns:
            DataFrame with columns: trade (1-based), balance, result, date
        """
        dates = [r.created_at.date() for r in self.records]
        return pd.DataFrame({
            'trade': np.arange(1, len(self.df) + 1),
            'balance': self._balances().to_numpy(dtype=float),
            'result': self.df['result'].to_numpy(dtype=float),
            'date': dates,
        }, columns=['trade', 'balance', 'result', 'date'])

    def drawdown_curve(self) -> Tuple[pd.DataFrame, float]:
        """
        Percentage drop from the running peak balance after each trade.

        The peak starts at starting capital. Where the peak is not positive
        the drawdown is reported as 0.

        Returns:
            (DataFrame with columns: trade, drawdown, balance; max drawdown %)
        """
        balance = self._balances()
        peak = np.maximum(balance.cummax(), self.starting_capital)
        drawdown = ((peak - balance) / peak.where(peak > 0) * 100).fillna(0.0)

        data = pd.DataFrame({
            'trade': np.arange(1, len(self.df) + 1),
            'drawdown': drawdown.to_numpy(dtype=float),
            'balance': balance.to_numpy(dtype=float),
        }, columns=['trade', 'drawdown', 'balance'])

        max_drawdown = float(drawdown.max()) if not drawdown.empty else 0.0
        return data, max_drawdown

    def monthly_performance(self) -> pd.DataFrame:
        """
        Net result per calendar month, local time.

        Months appear in the order they first occur in the ledger.

        Returns:
            DataFrame with columns: month ('Jan 2024'), profit
        """
        if self.df.empty:
            return pd.DataFrame(columns=['month', 'profit'])

        months = pd.Series([r.created_at.strftime(MONTH_FORMAT) for r in self.records],
                           index=self.df.index)
        grouped = self.df['result'].groupby(months, sort=False).sum()

        return pd.DataFrame({
            'month': grouped.index.to_list(),
            'profit': grouped.to_numpy(dtype=float),
        })

    def trade_history(self) -> pd.DataFrame:
        """Trades newest first, ready for display."""
        history = pd.DataFrame({
            'id': self.df['id'],
            'time': [r.created_at for r in self.records],
            'decision': self.df['decision'],
            'tp': self.df['tp'],
            'sl': self.df['sl'],
            'result': self.df['result'],
        }, columns=['id', 'time', 'decision', 'tp', 'sl', 'result'])
        return history.iloc[::-1].reset_index(drop=True)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def win_loss_distribution(self) -> Dict[str, Dict[str, Any]]:
        """Count and total amount of wins (TP) and losses (SL)."""
        wins = self.df[self.df['is_win']]
        losses = self.df[~self.df['is_win']]

        return {
            'wins': {
                'count': int(len(wins)),
                'amount': float(wins['tp'].sum()),
            },
            'losses': {
                'count': int(len(losses)),
                'amount': float(losses['sl'].sum()),
            },
        }

    def calculate_performance_metrics(self) -> Dict[str, Any]:
        """
        Calculate core performance metrics.

        Returns:
            Dict with all key metrics. Ratios that cannot be computed are None;
            profit_factor is math.inf when there are wins but no losses.
        """
        distribution = self.win_loss_distribution()
        total_trades = int(len(self.df))
        wins = distribution['wins']['count']
        losses = distribution['losses']['count']
        wins_amount = distribution['wins']['amount']
        losses_amount = distribution['losses']['amount']

        total_net = float(self.df['result'].sum())
        win_rate = _ratio(wins * 100.0, total_trades)
        avg_net = _ratio(total_net, total_trades)
        avg_win = wins_amount / wins if wins > 0 else 0.0
        avg_loss = losses_amount / losses if losses > 0 else 0.0

        # Profit factor (gross wins / gross losses)
        if total_trades == 0:
            profit_factor = None
        elif losses_amount == 0:
            profit_factor = math.inf
        else:
            profit_factor = wins_amount / losses_amount

        risk_reward = avg_win / avg_loss if wins > 0 and losses > 0 else None

        best_win = float(self.df.loc[self.df['is_win'], 'tp'].max()) if wins > 0 else 0.0
        worst_loss = float(self.df.loc[~self.df['is_win'], 'sl'].max()) if losses > 0 else 0.0

        current_balance = self.starting_capital + total_net
        total_profit = current_balance - self.starting_capital

        return {
            'total_trades': total_trades,
            'wins': wins,
            'losses': losses,
            'total_net': total_net,
            'wins_amount': wins_amount,
            'losses_amount': losses_amount,
            'win_rate': win_rate,
            'avg_net': avg_net,
            'avg_win': avg_win,
            'avg_loss': avg_loss,
            'profit_factor': profit_factor,
            'best_win': best_win,
            'worst_loss': worst_loss,
            'risk_reward': risk_reward,
            'starting_capital': self.starting_capital,
            'current_balance': current_balance,
            'total_profit': total_profit,
            'total_return_pct': _ratio(total_profit * 100.0, self.starting_capital),
        }

    def generate_report(self) -> str:
        """Generate a plain-text performance report."""
        m = self.calculate_performance_metrics()
        _, max_drawdown = self.drawdown_curve()

        report = f"""
PERFORMANCE REPORT
{'=' * 60}
Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

ACCOUNT
{'=' * 60}
Starting Capital: {_money(m['starting_capital'])}
Current Balance: {_money(m['current_balance'])}
Total Profit: {_money(m['total_profit'])} ({_pct(m['total_return_pct'])})
Max Drawdown: {max_drawdown:.2f}%

TRADES
{'=' * 60}
Total Trades: {m['total_trades']}
Wins: {m['wins']}  |  Losses: {m['losses']}
Win Rate: {_pct(m['win_rate'], 1)}

P&L SUMMARY
{'=' * 60}
Total Net: {format_number(round(m['total_net'], 2))}
Total Wins: {format_number(round(m['wins_amount'], 2))}  |  Total Losses: {format_number(round(m['losses_amount'], 2))}
Avg Net: {_plain(m['avg_net'])}
Avg Win: {_plain(m['avg_win'])}  |  Avg Loss: {_plain(m['avg_loss'])}
Best Win: {_plain(m['best_win'])}  |  Worst Loss: {_plain(m['worst_loss'])}

RATIOS
{'=' * 60}
Profit Factor: {_plain(m['profit_factor'])}
Risk/Reward: {_plain(m['risk_reward'])}

{'=' * 60}
"""

        return report


def _plain(value: Optional[float], digits: int = 2) -> str:
    if value is None:
        return "N/A"
    if math.isinf(value):
        return "∞"
    return f"{value:.{digits}f}"


def _pct(value: Optional[float], digits: int = 2) -> str:
    text = _plain(value, digits)
    return text if text == "N/A" else f"{text}%"


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
