## _args.py
# Common argument parsing code.
import argparse
import logging

import ircsession
from ircsession import protocol


def session_from_args(name, description, default_nick='ircsession', cls=ircsession.Session, **kwargs):
    """ Parse command line arguments and return a session configured from them. Extra keyword arguments go to the session. """
    parser = argparse.ArgumentParser(name, description=description, add_help=False,
        epilog='This program is part of {package}.'.format(package=ircsession.__name__))

    meta = parser.add_argument_group('Meta')
    meta.add_argument('-h', '--help', action='help', help='What you are reading right now.')
    meta.add_argument('-v', '--version', action='version', version='{package}/%(prog)s {ver}'.format(package=ircsession.__name__, ver=ircsession.__version__), help='Dump version number.')
    meta.add_argument('-V', '--verbose', help='Be verbose in warnings and errors.', action='store_true', default=False)
    meta.add_argument('-d', '--debug', help='Show debug output.', action='store_true', default=False)

    conn = parser.add_argument_group('Connection')
    conn.add_argument('server', help='The server to connect to.', metavar='SERVER')
    conn.add_argument('-p', '--port', help='The port to use. (default: 6667, 6697 (TLS))', type=int)
    conn.add_argument('-P', '--password', help='Server password.', metavar='PASS')
    conn.add_argument('--tls', help='Use TLS. (default: no)', action='store_true', default=False)
    conn.add_argument('--verify-tls', help='Verify TLS certificate sent by server. (default: no)', action='store_true', default=False)
    conn.add_argument('-e', '--encoding', help='Connection encoding. (default: auto-detect)', default=None, metavar='ENCODING')

    init = parser.add_argument_group('Initialization')
    init.add_argument('-n', '--nickname', help='Nickname. (default: {})'.format(default_nick), default=default_nick, metavar='NICK')
    init.add_argument('-u', '--username', help='Username. (default: derived from nickname)', metavar='USER')
    init.add_argument('-r', '--realname', help='Realname (GECOS). (default: derived from nickname)', metavar='REAL')

    args = parser.parse_args()

    # Set log level.
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    else:
        log_level = logging.ERROR
    logging.basicConfig(level=log_level)

    if args.port:
        port = args.port
    elif args.tls:
        port = protocol.DEFAULT_TLS_PORT
    else:
        port = protocol.DEFAULT_PORT

    return cls(nickname=args.nickname, username=args.username or args.nickname.lower(),
               realname=args.realname or args.nickname, host=args.server, port=port,
               password=args.password, encoding=args.encoding, tls=args.tls, tls_verify=args.verify_tls,
               **kwargs)
