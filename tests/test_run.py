import asyncio

import pytest

import ircsession
from ircsession import connection as transport
from ircsession.utils.run import run_until_disconnected
from .fixtures import DEFAULT_OPTIONS
from .mocks import MockConnection


def make_session():
    conn = MockConnection()
    return ircsession.Session(connection=conn, **DEFAULT_OPTIONS), conn


@pytest.mark.asyncio
async def test_run_until_disconnected():
    session, conn = make_session()

    def serve():
        conn.establish()
        conn.drop()

    asyncio.get_running_loop().call_soon(serve)
    assert await asyncio.wait_for(run_until_disconnected(session), 5)
    assert session.state == ircsession.DISCONNECTED


@pytest.mark.asyncio
async def test_run_until_disconnected_connect_failure():
    session, conn = make_session()

    def refuse():
        conn._set_state(transport.UNCONNECTED)
        conn._emit('error', ConnectionRefusedError())

    asyncio.get_running_loop().call_soon(refuse)
    assert not await asyncio.wait_for(run_until_disconnected(session), 5)
    assert conn._handlers['error'] == [session._on_error]


@pytest.mark.asyncio
async def test_run_until_disconnected_error_while_connected():
    session, conn = make_session()
    loop = asyncio.get_running_loop()

    def fail():
        conn.establish()
        # Errors on a live connection are followed by a disconnect.
        conn._emit('error', OSError('reset'))
        loop.call_soon(conn.drop)

    loop.call_soon(fail)
    assert await asyncio.wait_for(run_until_disconnected(session), 5)


@pytest.mark.asyncio
async def test_run_until_disconnected_incomplete_identity():
    session, conn = make_session()
    session.nickname = ''
    assert not await run_until_disconnected(session)
    assert conn.connects == []
