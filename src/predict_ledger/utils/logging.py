"""
Logging setup for the ledger.

Modules log through dotted loggers (``ledger.settlement``, ``ledger.db``, …)
with a ``TAG │ details`` message convention.
"""

import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """Configure root logger with standard format"""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Keep SQL statement logging off
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
