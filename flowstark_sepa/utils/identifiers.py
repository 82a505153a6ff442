"""Identifier generation for messages, payment blocks and transactions"""

import random
import string
from datetime import datetime
from typing import Optional

from flowstark_sepa.domain.models import SequenceType

MAX35 = 35  # ISO 20022 Max35Text
_ALPHABET = string.digits + string.ascii_uppercase


class IdentifierGenerator:
    """
    Builds MsgId / PmtInfId / EndToEndId values.

    The random suffix comes from an injectable `random.Random`, so tests can
    seed it and get byte-identical documents.
    """

    def __init__(
        self,
        prefix: str = "FLOWSTARK",
        rng: Optional[random.Random] = None,
        suffix_length: int = 6,
        end_to_end_budget: int = 25,
    ):
        self.prefix = prefix
        self.rng = rng or random.SystemRandom()
        self.suffix_length = suffix_length
        self.end_to_end_budget = end_to_end_budget

    @staticmethod
    def _timestamp(now: datetime) -> str:
        return now.strftime("%Y%m%d%H%M%S")

    def random_suffix(self) -> str:
        return "".join(self.rng.choice(_ALPHABET) for _ in range(self.suffix_length))

    def message_id(self, now: datetime) -> str:
        """FLOWSTARK-20250301093000-K3J9QZ"""
        return f"{self.prefix}-{self._timestamp(now)}-{self.random_suffix()}"[:MAX35]

    def payment_id(self, now: datetime, index: int, sequence_type: SequenceType) -> str:
        """PMT-20250301093000-0001-FRST, index is unique within the message"""
        return f"PMT-{self._timestamp(now)}-{index:04d}-{sequence_type.value}"[:MAX35]

    def end_to_end_id(self, item_id: str) -> str:
        return f"E2E-{item_id[: self.end_to_end_budget]}"[:MAX35]
