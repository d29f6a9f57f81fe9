import pytest

from srtproto.loss_list import (
    SEQ_MAX,
    ReceiveLossList,
    SendLossList,
    seq_add,
    seq_is_after,
    seq_is_before,
    seq_offset,
)


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def test_seq_add_wraps():
    assert seq_add(SEQ_MAX, 1) == 0
    assert seq_add(0, -1) == SEQ_MAX
    assert seq_add(10, 5) == 15


def test_seq_offset_across_wrap():
    assert seq_offset(SEQ_MAX, 0) == 1
    assert seq_offset(0, SEQ_MAX) == -1
    assert seq_offset(10, 14) == 4


def test_seq_ordering():
    assert seq_is_before(10, 11)
    assert not seq_is_before(11, 10)
    assert seq_is_after(0, SEQ_MAX)
    assert not seq_is_after(5, 5)


def test_fresh_losses_always_eligible():
    lst = ReceiveLossList()
    lst.insert_range(10, 14)
    ranges = lst.get_loss_ranges(999.0)
    assert ranges == [(10, 14)]


def test_suppression_within_interval():
    lst = ReceiveLossList()
    lst.insert_range(10, 12)
    assert len(lst.get_loss_ranges(10.0)) == 1
    assert lst.get_loss_ranges(10.0) == []


def test_re_eligible_after_interval():
    clock = FakeClock()
    lst = ReceiveLossList(clock=clock)
    lst.insert_range(10, 10)
    assert len(lst.get_loss_ranges(0.001)) == 1
    clock.now += 0.005
    assert len(lst.get_loss_ranges(0.001)) == 1


def test_removed_losses_not_reported():
    lst = ReceiveLossList()
    lst.insert_range(10, 14)
    lst.remove(12)
    assert len(lst) == 4
    ranges = lst.get_loss_ranges(0.0)
    assert ranges == [(10, 11), (13, 14)]


def test_acknowledge_clears_old_entries():
    lst = ReceiveLossList()
    lst.insert_range(10, 20)
    lst.acknowledge(15)
    assert len(lst) == 6
    assert lst.get_loss_ranges(0.0) == [(15, 20)]


def test_insert_preserves_existing_entries():
    lst = ReceiveLossList()
    lst.insert_range(10, 12)
    lst.get_loss_ranges(0.0)
    lst.insert_range(11, 14)
    assert lst.get_loss_ranges(999.0) == [(13, 14)]


def test_receive_clear():
    lst = ReceiveLossList()
    lst.insert_range(1, 3)
    lst.clear()
    assert len(lst) == 0
    assert lst.get_loss_ranges(0.0) == []


def test_receive_reversed_range_inserts_nothing():
    lst = ReceiveLossList()
    lst.insert_range(14, 10)
    assert len(lst) == 0


def test_send_insert_and_pop_in_order():
    lst = SendLossList()
    lst.insert(30)
    lst.insert_range(10, 12)
    assert len(lst) == 4
    assert lst.peek_front() == 10
    assert [lst.pop_front() for _ in range(4)] == [10, 11, 12, 30]
    assert lst.pop_front() is None
    assert lst.peek_front() is None


def test_send_insert_duplicate_counts_once():
    lst = SendLossList()
    lst.insert(5)
    lst.insert(5)
    assert len(lst) == 1


def test_send_remove_and_acknowledge():
    lst = SendLossList()
    lst.insert_range(10, 20)
    lst.remove(20)
    assert 20 not in lst
    lst.acknowledge(15)
    assert len(lst) == 5
    assert lst.peek_front() == 15


def test_send_range_across_wrap():
    lst = SendLossList()
    lst.insert_range(SEQ_MAX - 1, 1)
    assert len(lst) == 4
    assert SEQ_MAX in lst and 0 in lst
    lst.acknowledge(0)
    assert len(lst) == 2
    assert 0 in lst and 1 in lst


def test_send_clear():
    lst = SendLossList()
    lst.insert_range(1, 5)
    lst.clear()
    assert len(lst) == 0


@pytest.mark.parametrize("first,last", [(100, 100), (100, 103)])
def test_receive_single_range_roundtrip(first, last):
    lst = ReceiveLossList()
    lst.insert_range(first, last)
    assert lst.get_loss_ranges(0.0) == [(first, last)]