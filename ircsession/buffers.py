## buffers.py
# Registry of conversation buffers, keyed by normalized target.
from . import parsing, protocol

__all__ = ['BufferRegistry']


class BufferRegistry:
    """
    Maps conversation targets to buffers, with at most one buffer per case-insensitive target.

    Buffers are built through `factory(target)`. `added` and `removed`, if given, are called with the buffer
    whenever one enters or leaves the registry.
    """

    def __init__(self, factory, added=None, removed=None, case_mapping=protocol.DEFAULT_CASE_MAPPING):
        self.factory = factory
        self.added = added
        self.removed = removed
        self._buffers = parsing.NormalizingDict(case_mapping=case_mapping)

    def add(self, target):
        """ Return the buffer for target, creating it if it doesn't exist yet. """
        if target in self._buffers:
            return self._buffers[target]

        buffer = self.factory(target)
        self._buffers[target] = buffer
        if self.added:
            self.added(buffer)
        return buffer

    def remove(self, buffer):
        """ Remove buffer. Does nothing unless buffer is the one currently registered for its target. """
        if buffer is None:
            return False
        if self._buffers.get(buffer.pattern) is not buffer:
            return False

        del self._buffers[buffer.pattern]
        if self.removed:
            self.removed(buffer)
        return True

    def lookup(self, target):
        """ Return the buffer for target, or None. """
        return self._buffers.get(target)

    def __contains__(self, target):
        return target in self._buffers

    def __iter__(self):
        return iter(list(self._buffers.values()))

    def __len__(self):
        return len(self._buffers)
