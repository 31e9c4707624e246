"""Tests for order number generation."""

import re

from marketplace.order.numbering import OrderNumberBatch, new_order_number


class TestOrderNumbers:
    def test_format(self):
        number = new_order_number(2, prefix="MKT", now_millis=1700000000000)
        assert re.fullmatch(r"MKT-1700000000000-2-[0-9a-f]{6}", number)

    def test_prefix_from_environment(self, monkeypatch):
        monkeypatch.setenv("ORDER_NUMBER_PREFIX", "SHOP")
        assert new_order_number(1).startswith("SHOP-")

    def test_batch_numbers_are_distinct_and_sequenced(self):
        batch = OrderNumberBatch(prefix="MKT", now_millis=1)
        numbers = [batch.next() for _ in range(3)]
        assert len(set(numbers)) == 3
        assert [n.split("-")[2] for n in numbers] == ["1", "2", "3"]

    def test_same_millisecond_checkouts_do_not_collide(self):
        first = OrderNumberBatch(prefix="MKT", now_millis=5).next()
        second = OrderNumberBatch(prefix="MKT", now_millis=5).next()
        assert first != second
