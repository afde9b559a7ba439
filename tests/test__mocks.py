from pytest import mark

import ircsession
from .fixtures import with_session
from .mocks import Mock, MockConnection


## Connection.


@mark.meta
def test_mock_connection_connect():
    conn = MockConnection()
    conn.connect('mock.local', 1337)

    assert conn.connects == [('mock.local', 1337)]
    assert conn.state == ircsession.connection.CONNECTING
    assert not conn.connected


@mark.meta
def test_mock_connection_events():
    conn = MockConnection()
    connected = Mock()
    data = Mock()
    conn.on('connected', connected)
    conn.on('data', data)

    conn.establish()
    conn.receive('PING :x\r\n')
    assert conn.connected
    assert connected.called
    data.assert_called_once_with(b'PING :x\r\n')

    conn.off('data', data)
    conn.receive('PING :y\r\n')
    assert data.call_count == 1


@mark.meta
def test_mock_connection_write():
    conn = MockConnection()
    assert conn.write(b'NICK a\r\n')
    assert conn.lines == ['NICK a']

    conn = MockConnection(write_result=False)
    assert not conn.write(b'NICK a\r\n')
    assert conn.written == []


@mark.meta
def test_mock_connection_close_disconnects():
    conn = MockConnection()
    disconnected = Mock()
    conn.on('disconnected', disconnected)

    conn.close()
    assert not disconnected.called

    conn.establish()
    conn.close()
    assert disconnected.called
    assert conn.close_calls == 2


## Session.


@mark.meta
@with_session(connected=False)
def test_fixtures_with_session(session, connection):
    assert isinstance(session, ircsession.Session)
    assert isinstance(connection, MockConnection)
    assert session.connection is connection
    assert session.state == ircsession.IDLE
    assert connection.written == []


@mark.meta
@with_session()
def test_fixtures_with_session_connected(session, connection):
    assert session.connected
    assert session.state == ircsession.CONNECTING
    assert connection.written == []


@mark.meta
@with_session(registered=True)
def test_fixtures_with_session_registered(session, connection):
    assert session.registered


@mark.meta
@with_session(realname='Someone Else')
def test_fixtures_with_session_options(session, connection):
    assert session.realname == 'Someone Else'
    assert session.nickname == 'TestcaseRunner'
