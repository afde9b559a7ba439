## run.py
# Connect and log everything that happens.
import asyncio
import logging

from . import _args

logger = logging.getLogger(__name__)


async def run_until_disconnected(session):
    """
    Open session and wait until it disconnects.
    Returns False if it could not be opened or the connection could not be established.
    """
    loop = asyncio.get_running_loop()
    finished = loop.create_future()
    connection = session.connection

    def disconnected():
        if not finished.done():
            finished.set_result(True)

    def failed(error):
        # Errors on an established connection are followed by a disconnect.
        if not session.connected and not finished.done():
            finished.set_result(False)

    session.add_listener('disconnected', disconnected)
    if connection:
        connection.on('error', failed)

    try:
        if not session.open():
            return False
        return await finished
    finally:
        session.remove_listener('disconnected', disconnected)
        if connection:
            connection.off('error', failed)


async def _main():
    session = _args.session_from_args('ircsession', description='ircsession IRC library.')
    session.add_listener('connected', lambda: logger.warning('Registered with %s.', session.host))
    session.add_listener('message', lambda message: print(message))
    if not await run_until_disconnected(session):
        logger.error('Could not connect to %s:%s.', session.host, session.port)


def main():
    asyncio.run(_main())


if __name__ == '__main__':
    main()
