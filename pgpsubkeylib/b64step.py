# vim: set ts=8 sw=4 sts=4 et ai tw=79:
"""
pgpsubkeylib -- Sort generated PGP (sub)keys by creation time (Library)
Copyright (C) 2024  Walter Doekes <wdoekes>, OSSO B.V.

    This library is free software; you can redistribute it and/or modify it
    under the terms of the GNU Lesser General Public License as published by
    the Free Software Foundation; either version 3 of the License, or (at
    your option) any later version.

    This library is distributed in the hope that it will be useful, but
    WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
    Lesser General Public License for more details.

    You should have received a copy of the GNU Lesser General Public
    License along with this library; if not, write to the Free Software
    Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA 02111-1307,
    USA.

Incremental base64 decoding on top of the stdlib decoder.

The stdlib b64decode() wants complete input. Here the input may arrive in
pieces of any size: every call decodes the complete 4-character quanta it
has and carries the rest over in a DecodeState, so a stream can be fed in
chunks and yield the same bytes as a single decode of the whole.

Input must already be well formed: base64 alphabet only (no whitespace),
padding only at the very end of the stream. A binascii.Error is raised on
characters outside the alphabet; other malformations give unspecified
output.
"""
from base64 import b64decode

__all__ = ('Base64StepDecoder', 'DecodeState', 'decode_step')


class DecodeState(object):
    """
    Characters that did not yet form a complete quantum.
    """
    __slots__ = ('pending',)

    def __init__(self):
        self.pending = b''

    def __repr__(self):
        return '<%s: %d pending>' % (
            self.__class__.__name__, len(self.pending))


def decode_step(data, state):
    """
    Decode data, prefixed by what state holds from a previous call. Returns
    the decoded bytes; the incomplete tail is stored back into state.
    """
    if isinstance(data, str):
        data = data.encode('ascii')
    data = state.pending + data
    usable = len(data) - (len(data) % 4)
    state.pending = data[usable:]
    if not usable:
        return b''
    return b64decode(data[:usable], validate=True)


class Base64StepDecoder(object):
    def __init__(self):
        self.state = DecodeState()

    @property
    def pending(self):
        return len(self.state.pending)

    def decode(self, data):
        return decode_step(data, self.state)
