"""
Transaction execution helpers: gas estimation and confirmation tracking.
"""

from .executor import TransactionExecutor
from .models import GasEstimate, PreparedTransaction, TransactionReceipt, TransactionStatus

__all__ = [
    "GasEstimate",
    "PreparedTransaction",
    "TransactionExecutor",
    "TransactionReceipt",
    "TransactionStatus",
]
