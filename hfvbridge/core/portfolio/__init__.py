"""Balance and portfolio value objects."""

from .models import BalanceEntry, BalanceSource, Portfolio, PortfolioChain

__all__ = [
    "BalanceEntry",
    "BalanceSource",
    "Portfolio",
    "PortfolioChain",
]
