"""Per-trader profit ledgers for binary prediction markets.

Public API:
- Ledger / build_ledger: apply bet, resolution and redemption events
- LedgerConfig / build_config: configuration
- persistence.queries: keyed reads of the resulting records
"""

from predict_ledger.config import LedgerConfig, build_config
from predict_ledger.ledger import Ledger, LedgerStats, build_ledger
from predict_ledger.models import INVALID, BetState

__all__ = [
    "INVALID",
    "BetState",
    "Ledger",
    "LedgerConfig",
    "LedgerStats",
    "build_config",
    "build_ledger",
]
