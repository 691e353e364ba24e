"""commitproof: Tamper-evident attestation of git commits against an append-only registry."""

from __future__ import annotations

import logging

__version__ = "0.1.0"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())
