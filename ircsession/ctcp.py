## ctcp.py
# Client-to-Client-Protocol (CTCP) quoting.
from . import protocol

__all__ = ['is_ctcp', 'is_action', 'construct_ctcp', 'unquote_ctcp', 'parse_ctcp']


def is_ctcp(message):
    """ Check if message is (the start of) a CTCP message. Unterminated queries are accepted, as some clients send those. """
    return message.startswith(protocol.CTCP_DELIMITER)

def is_action(message):
    """ Check if message is a CTCP ACTION. """
    return message.startswith(protocol.CTCP_DELIMITER + protocol.CTCP_ACTION + ' ')

def construct_ctcp(*parts):
    """ Construct CTCP message. """
    message = ' '.join(part for part in parts if part is not None)
    message = message.replace(protocol.CTCP_ESCAPE_CHAR, protocol.CTCP_ESCAPE_CHAR + protocol.CTCP_ESCAPE_CHAR)
    message = message.replace('\0', protocol.CTCP_ESCAPE_CHAR + '0')
    message = message.replace('\n', protocol.CTCP_ESCAPE_CHAR + 'n')
    message = message.replace('\r', protocol.CTCP_ESCAPE_CHAR + 'r')
    return protocol.CTCP_DELIMITER + message + protocol.CTCP_DELIMITER

def unquote_ctcp(query):
    """ Strip delimiters from and de-quote a CTCP message. """
    query = query.strip(protocol.CTCP_DELIMITER)
    query = query.replace(protocol.CTCP_ESCAPE_CHAR + '0', '\0')
    query = query.replace(protocol.CTCP_ESCAPE_CHAR + 'n', '\n')
    query = query.replace(protocol.CTCP_ESCAPE_CHAR + 'r', '\r')
    query = query.replace(protocol.CTCP_ESCAPE_CHAR + protocol.CTCP_ESCAPE_CHAR, protocol.CTCP_ESCAPE_CHAR)
    return query

def parse_ctcp(query):
    """ Split CTCP message into type and contents. Contents are None if the query has none. """
    query = unquote_ctcp(query)
    if ' ' in query:
        type, contents = query.split(' ', 1)
        return type, contents
    return query, None
