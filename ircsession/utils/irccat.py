#!/usr/bin/env python3
## irccat.py
# Simple irccat implementation, using ircsession.
import asyncio
import logging
import sys

from . import _args
from .run import run_until_disconnected

logger = logging.getLogger(__name__)


class IRCCat:
    """ irccat. Takes raw messages on stdin, dumps raw messages to stdout. Life has never been easier. """

    def __init__(self, session, output=sys.stdout):
        self.session = session
        self.output = output
        self.session.trace = self.dump

    def dump(self, line):
        print(line, file=self.output, flush=True)

    async def process_stdin(self):
        """ Send every line on stdin to the server, quit on EOF. """
        loop = asyncio.get_running_loop()

        reader = asyncio.StreamReader()
        reader_protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: reader_protocol, sys.stdin)

        while True:
            line = await reader.readline()
            if not line:
                break
            self.session.raw(line.decode('utf-8', errors='replace'))

        self.session.quit('EOF')


async def _main():
    session = _args.session_from_args('irccat', default_nick='irccat',
                                      description='Process raw IRC messages from stdin, dump received IRC messages to stdout.')
    irccat = IRCCat(session)
    session.add_listener('connected', lambda: asyncio.get_running_loop().create_task(irccat.process_stdin()))
    if not await run_until_disconnected(session):
        logger.error('Could not connect to %s:%s.', session.host, session.port)


def main():
    # Setup logging.
    logging.basicConfig(format='!! %(levelname)s: %(message)s')
    asyncio.run(_main())


if __name__ == '__main__':
    main()
