import ircsession
from .mocks import MockConnection

DEFAULT_OPTIONS = {
    'nickname': 'TestcaseRunner',
    'username': 'runner',
    'realname': 'Testcase Runner',
    'host': 'mock.local',
    'port': 1337,
}
WELCOME = b':mock.local 001 TestcaseRunner :Welcome to the Mock IRC Network TestcaseRunner\r\n'


def with_session(connected=True, registered=False, cls=ircsession.Session, connection_options=None, **options):
    """ Run test with a session talking to a mock connection. Connected sessions have sent their registration already. """
    def inner(f):
        def run():
            connection = MockConnection(**(connection_options or {}))
            session = cls(connection=connection, **dict(DEFAULT_OPTIONS, **options))
            if connected:
                session.open()
                connection.establish()
                connection.clear()
            if registered:
                connection.receive(WELCOME)

            return f(session=session, connection=connection)

        run.__name__ = f.__name__
        return run
    return inner
