import pytest

from ircsession import protocol
from ircsession.framing import LineFramer


def collect(*chunks, limit=protocol.DEFAULT_RECEIVE_LIMIT):
    lines = []
    framer = LineFramer(lines.append, limit=limit)
    for chunk in chunks:
        framer.feed(chunk)
    return lines, framer


def test_framer_crlf():
    lines, framer = collect(b'PING :a\r\nPING :b\r\n')
    assert lines == [b'PING :a', b'PING :b']
    assert framer.pending == 0


def test_framer_lf_fallback():
    lines, _ = collect(b'PING :a\nPING :b\n')
    assert lines == [b'PING :a', b'PING :b']


def test_framer_mixed_separators():
    lines, _ = collect(b'PING :a\r\nPING :b\nPING :c\r\n')
    assert lines == [b'PING :a', b'PING :b', b'PING :c']


def test_framer_holds_partial_line():
    lines, framer = collect(b'PING :a\r\nPING :b')
    assert lines == [b'PING :a']
    assert framer.pending == len(b'PING :b')

    framer.feed(b'c\r\n')
    assert lines == [b'PING :a', b'PING :bc']
    assert framer.pending == 0


def test_framer_split_separator():
    lines, _ = collect(b'PING :a\r', b'\nPING :b\r', b'\n')
    assert lines == [b'PING :a', b'PING :b']


@pytest.mark.parametrize('size', [1, 2, 3, 5, 7, 13])
def test_framer_chunk_boundaries(size):
    data = b':irc.local 001 me :Welcome\r\n:a!b@c PRIVMSG #x :hi there\r\n\r\nPING :abc\nNOTICE me :ok\r\n'
    whole, _ = collect(data)
    chunks = [data[i:i + size] for i in range(0, len(data), size)]
    chunked, _ = collect(*chunks)
    assert chunked == whole


def test_framer_drops_empty_lines():
    lines, _ = collect(b'\r\n\n   \r\n\t\nPING :a\r\n')
    assert lines == [b'PING :a']


def test_framer_strips_whitespace():
    lines, _ = collect(b'  PING :a  \r\n')
    assert lines == [b'PING :a']


def test_framer_reset():
    lines, framer = collect(b'PING :a')
    framer.reset()
    framer.feed(b'PING :b\r\n')
    assert lines == [b'PING :b']


def test_framer_overflow():
    lines, framer = collect(limit=16)
    with pytest.raises(protocol.ReceiveBufferOverflow) as exc:
        framer.feed(b'PING :a\r\n' + b'x' * 17)

    assert lines == [b'PING :a']
    assert exc.value.size == 17
    assert exc.value.limit == 16
    assert framer.pending == 0


def test_framer_overflow_counts_only_pending_data():
    lines, framer = collect(limit=16)
    framer.feed(b'PING :a\r\n' * 10)
    assert len(lines) == 10


def test_framer_unlimited():
    lines, framer = collect(b'x' * 100000, limit=None)
    assert lines == []
    assert framer.pending == 100000


def test_framer_failing_handler_leaves_no_stale_lines():
    seen = []

    def on_line(line):
        seen.append(line)
        if line == b'PING :bad':
            raise ValueError(line)

    framer = LineFramer(on_line)
    with pytest.raises(ValueError):
        framer.feed(b'PING :bad\r\nPING :good\r\nPART')
    assert framer.pending == len(b'PART')

    framer.feed(b' #chan\r\n')
    assert seen == [b'PING :bad', b'PART #chan']
