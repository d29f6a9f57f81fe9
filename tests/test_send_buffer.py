from srtproto.loss_list import SEQ_MAX, seq_add
from srtproto.send_buffer import PacketBoundary, SendBuffer


class FakeClock:
    def __init__(self, now=50.0):
        self.now = now

    def __call__(self):
        return self.now


def drain(buf):
    out = []
    while (entry := buf.next_packet()) is not None:
        out.append(entry)
    return out


def test_segmentation_boundaries_and_payload():
    buf = SendBuffer(100, 4, 1000)
    data = b"abcdefghij"
    count = buf.add_message(data)
    packets = drain(buf)
    assert count == len(packets) == len(buf)
    assert [p.boundary for p in packets] == [
        PacketBoundary.FIRST,
        PacketBoundary.SUBSEQUENT,
        PacketBoundary.LAST,
    ]
    assert b"".join(p.data for p in packets) == data
    assert [p.seq_no for p in packets] == [seq_add(1000, i) for i in range(count)]
    assert len({p.msg_no for p in packets}) == 1


def test_small_message_is_solo():
    buf = SendBuffer(10, 1316, 5)
    assert buf.add_message(b"hello") == 1
    packet = buf.next_packet()
    assert packet.boundary is PacketBoundary.SOLO
    assert packet.data == b"hello"
    assert packet.seq_no == 5


def test_empty_message_is_one_solo_packet():
    buf = SendBuffer(10, 1316, 5)
    assert buf.add_message(b"") == 1
    packet = buf.next_packet()
    assert packet.data == b""
    assert packet.boundary is PacketBoundary.SOLO


def test_zero_payload_size_keeps_message_whole():
    buf = SendBuffer(10, 0, 0)
    assert buf.add_message(b"x" * 5000) == 1
    assert buf.peek_next_data() == b"x" * 5000


def test_full_buffer_rejects_message():
    buf = SendBuffer(2, 4, 0)
    assert buf.add_message(b"abcd") == 1
    assert buf.add_message(b"abcdefgh") is None
    assert len(buf) == 1
    assert buf.next_seq_no == 1
    buf.add_message(b"x")
    assert buf.is_full()


def test_message_numbers_increase():
    buf = SendBuffer(10, 1316, 0)
    buf.add_message(b"a")
    buf.add_message(b"b")
    first, second = drain(buf)
    assert second.msg_no == first.msg_no + 1


def test_next_packet_stamps_origin_time_and_advances():
    clock = FakeClock()
    buf = SendBuffer(10, 1316, 0, clock=clock)
    buf.add_message(b"a")
    clock.now += 2.0
    packet = buf.next_packet()
    assert packet.send_count == 1
    assert packet.origin_time == clock.now
    assert packet.queue_time == clock.now - 2.0
    assert not buf.has_unsent()
    assert buf.next_packet() is None
    assert buf.peek_next_data() is None


def test_retransmit_keeps_origin_time():
    clock = FakeClock()
    buf = SendBuffer(10, 1316, 7, clock=clock)
    buf.add_message(b"a")
    original = buf.next_packet()
    clock.now += 1.0
    again = buf.get_packet_for_retransmit(7)
    assert again.send_count == original.send_count + 1
    assert again.origin_time == original.origin_time
    assert buf.get_packet_for_retransmit(8) is None


def test_get_packet_returns_stored_entry():
    buf = SendBuffer(10, 1316, 0)
    buf.add_message(b"a")
    entry = buf.get_packet(0)
    entry.acked = True
    buf.next_packet()
    assert buf.in_flight() == 0
    assert buf.get_packet(42) is None


def test_acknowledge_removes_and_adjusts_cursor():
    buf = SendBuffer(10, 1, 0)
    buf.add_message(b"abc")
    buf.next_packet()
    buf.next_packet()
    assert buf.acknowledge(2) == 2
    assert buf.first_unacked == 2
    assert buf.peek_next_data() == b"c"
    assert buf.next_packet().seq_no == 2
    assert buf.acknowledge(1) == 0
    assert buf.first_unacked == 2


def test_acknowledge_across_wrap():
    start = SEQ_MAX - 1
    buf = SendBuffer(10, 1, start)
    buf.add_message(b"abcd")
    assert buf.acknowledge(seq_add(start, 3)) == 3
    assert len(buf) == 1
    assert buf.first_unacked == seq_add(start, 3)


def test_in_flight_counts_sent_only():
    buf = SendBuffer(10, 1, 0)
    buf.add_message(b"abc")
    buf.next_packet()
    assert buf.in_flight() == 1
    assert buf.has_unsent()


def test_get_retransmit_packets_skips_unknown():
    buf = SendBuffer(10, 1, 0)
    buf.add_message(b"abc")
    found = buf.get_retransmit_packets([2, 99, 0])
    assert [e.seq_no for e in found] == [2, 0]


def test_drop_expired():
    clock = FakeClock()
    buf = SendBuffer(10, 1, 0, clock=clock)
    buf.add_message(b"ab", ttl=100)
    buf.add_message(b"c", ttl=-1)
    buf.next_packet()
    clock.now += 0.05
    assert buf.drop_expired() == 0
    clock.now += 0.2
    assert buf.drop_expired() == 2
    assert len(buf) == 1
    assert buf.next_packet().data == b"c"


def test_drop_expired_with_info_groups_by_message():
    clock = FakeClock()
    buf = SendBuffer(10, 1, 0, clock=clock)
    buf.add_message(b"ab", ttl=10)
    buf.add_message(b"cd", ttl=10)
    buf.add_message(b"e", ttl=-1)
    first_msg = buf.get_packet(0).msg_no
    second_msg = buf.get_packet(2).msg_no
    buf.next_packet()
    clock.now += 1.0
    info = buf.drop_expired_with_info()
    assert info == [(first_msg, 0, 1), (second_msg, 2, 3)]
    assert len(buf) == 1
    assert buf.peek_next_data() == b"e"
    assert buf.drop_expired_with_info() == []