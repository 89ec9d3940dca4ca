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
"""
from pgpsubkeylib.exceptions import SeekError, ShortReadError

__all__ = ('can_seek', 'iter_bounded_lines', 'read_exactly', 'seek_to')


def can_seek(fp):
    """
    Some file-like objects do have a seek attribute but raise an Illegal Seek
    IOError on usage.
    """
    try:
        fp.seek(0, 1)  # SEEK_CUR, move 0 bytes forward/backward
    except Exception:  # AttributeError, IOError
        return False
    return True


def seek_to(fp, offset):
    """
    Move to absolute offset. Seeking past the end is allowed by regular
    files; the short read that follows is what reports that case.
    """
    try:
        fp.seek(offset, 0)  # SEEK_SET
    except (AttributeError, IOError, ValueError) as e:  # ValueError: closed
        raise SeekError('cannot seek to offset %d' % (offset,), e)


def read_exactly(fp, size):
    """
    Read size bytes or raise ShortReadError. A single read() is enough for
    regular files and BytesIO; pipes are not seekable and never get here.
    """
    data = fp.read(size)
    if len(data) < size:
        raise ShortReadError(
            'wanted %d bytes, got %d' % (size, len(data)))
    return data


def iter_bounded_lines(fp, limit):
    """
    Yield lines of at most limit bytes (terminator included).

    A physical line that does not fit is yielded once, truncated to limit
    bytes and without its terminator; the remainder of it is read and
    discarded. That way the tail of an over-long line never shows up as a
    line of its own.
    """
    while True:
        line = fp.readline(limit)
        if not line:
            break
        if len(line) == limit and not line.endswith(b'\n'):
            while True:
                rest = fp.readline(limit)
                if not rest or rest.endswith(b'\n'):
                    break
        yield line
