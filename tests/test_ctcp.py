from ircsession import ctcp


def test_is_ctcp():
    assert ctcp.is_ctcp('\x01VERSION\x01')
    assert ctcp.is_ctcp('\x01VERSION')
    assert not ctcp.is_ctcp('VERSION')


def test_is_action():
    assert ctcp.is_action('\x01ACTION waves\x01')
    assert not ctcp.is_action('\x01ACTIONwaves\x01')
    assert not ctcp.is_action('\x01VERSION\x01')


def test_construct_ctcp():
    assert ctcp.construct_ctcp('PING', '12345') == '\x01PING 12345\x01'
    assert ctcp.construct_ctcp('VERSION', None) == '\x01VERSION\x01'
    assert ctcp.construct_ctcp('ACTION', 'a\nb') == '\x01ACTION a\x16nb\x01'


def test_parse_ctcp():
    assert ctcp.parse_ctcp('\x01PING 12345\x01') == ('PING', '12345')
    assert ctcp.parse_ctcp('\x01VERSION\x01') == ('VERSION', None)
    assert ctcp.parse_ctcp('\x01ACTION a\x16nb\x01') == ('ACTION', 'a\nb')
