"""Canonical identifiers for ledger records.

Every composite key is written in one versioned form:

    participation:  v1:<trader>:<market>
    daily record:   v1:<trader>:<day>

Hex identifiers (addresses, condition ids, tx hashes) are stored lowercase with
a 0x prefix. Records written under the old ``<a>_<b>`` scheme are rewritten once
by ``persistence.db.migrate_legacy_ids`` instead of being probed at read time.
"""

from __future__ import annotations

from web3 import Web3

from predict_ledger.errors import InvalidEventError

ID_VERSION = "v1"

_PREFIX = f"{ID_VERSION}:"


def normalize_id(value: str | bytes) -> str:
    """Return the canonical form of a trader/market/bet identifier."""
    if isinstance(value, (bytes, bytearray)):
        if not value:
            raise InvalidEventError("identifier must not be empty")
        return Web3.to_hex(bytes(value))
    if not isinstance(value, str):
        raise InvalidEventError(f"identifier must be str or bytes, got {type(value).__name__}")
    text = value.strip()
    if not text:
        raise InvalidEventError("identifier must not be empty")
    if ":" in text:
        raise InvalidEventError(f"identifier must not contain ':': {text!r}")
    if text[:2].lower() == "0x":
        # "<tx hash>-<log index>" keeps its suffix
        head, sep, tail = text.partition("-")
        try:
            head = Web3.to_hex(Web3.to_bytes(hexstr=head))
        except ValueError as e:
            raise InvalidEventError(f"malformed hex identifier {text!r}: {e}") from e
        if head == "0x":
            raise InvalidEventError(f"empty hex identifier {text!r}")
        return head + sep + tail
    return text


def participation_id(trader: str, market: str) -> str:
    return f"{_PREFIX}{trader}:{market}"


def daily_id(trader: str, day: int) -> str:
    return f"{_PREFIX}{trader}:{day}"


def make_bet_id(tx_hash: str | bytes, log_index: int) -> str:
    """Bet id for a trade log: one trade per (transaction, log index)."""
    if log_index < 0:
        raise InvalidEventError(f"log_index must be >= 0, got {log_index}")
    return f"{normalize_id(tx_hash)}-{log_index}"


def is_canonical(record_id: str) -> bool:
    return record_id.startswith(_PREFIX)

