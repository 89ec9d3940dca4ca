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


class SubkeyException(Exception):
    class_ = 'general error'
    description = None

    def __init__(self, *args, **kwargs):
        super(Exception, self).__init__(*args, **kwargs)
        if self.args or not self.description:
            self.args = tuple((self.class_,) + self.args)
        else:
            self.args = (self.class_, self.description)


class KeyReadError(SubkeyException):
    class_ = 'key read error'
    description = 'undefined'


class OpenError(KeyReadError):
    description = 'file or directory could not be opened'


class ShortReadError(KeyReadError):
    description = 'fewer bytes available than required'


class SeekError(KeyReadError):
    description = 'required offset is unreachable'


class TimestampNotFoundError(KeyReadError):
    description = 'no 64-column payload line found in armored key'


class DecodeError(KeyReadError):
    description = 'payload line is not valid base64'


class RelocateError(SubkeyException):
    class_ = 'relocate error'
    description = 'could not move key file'


class UserError(SubkeyException):
    class_ = 'user error'
    description = 'undefined'
