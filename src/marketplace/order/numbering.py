"""Order numbers: ``<prefix>-<epoch millis>-<sequence>-<6 hex chars>``.

The sequence numbers the vendor orders of one checkout (1, 2, ...); the
random suffix keeps numbers distinct across checkouts in the same millisecond.
"""

import os
import time
from uuid import uuid4

DEFAULT_PREFIX = "MKT"


def order_number_prefix():
    return os.environ.get("ORDER_NUMBER_PREFIX", DEFAULT_PREFIX)


def new_order_number(sequence, prefix=None, now_millis=None):
    prefix = prefix or order_number_prefix()
    millis = now_millis if now_millis is not None else int(time.time() * 1000)
    return f"{prefix}-{millis}-{sequence}-{uuid4().hex[:6]}"


class OrderNumberBatch:
    """Numbers for the orders of a single checkout, sharing one timestamp."""

    def __init__(self, prefix=None, now_millis=None):
        self.prefix = prefix or order_number_prefix()
        self.millis = now_millis if now_millis is not None else int(time.time() * 1000)
        self.issued = 0

    def next(self):
        self.issued += 1
        return new_order_number(self.issued, prefix=self.prefix, now_millis=self.millis)
