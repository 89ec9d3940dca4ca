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

Pull the creation time out of an OpenPGP key without parsing the packets.

Both raw and ASCII-armored keys are supported. For raw keys the four bytes
are read at a fixed offset. For armored keys only the eight base64
characters that cover those four bytes get decoded, which is what makes this
fast enough to sift through a directory full of generated keys.

Precondition: the key data starts with the (sub)key packet, and that packet
uses a one-octet old-format length header:

    00 01 02 03 04 05 06 07 ...
    |  |  |  [  ctime  ] |-pub_algo
    |  |  |-version (4)
    |  |-length
    |-tag (0x98 public key, 0xb8 public subkey, ...)

That holds for the Ed25519/Curve25519 keys GnuPG, Sequoia and VanityGPG
write, and for RSA-1024 public keys. Anything else at that position is
returned as if it were the timestamp.

Armor lines are matched on their length without the line terminator: lines
ending in CRLF are accepted, and so is a 64-column last line without a
newline. Lines longer than the line buffer are skipped as a whole.
"""
from binascii import Error as BinasciiError

from pgpsubkeylib.b64step import Base64StepDecoder
from pgpsubkeylib.bytes import (
    can_seek, iter_bounded_lines, read_exactly, seek_to)
from pgpsubkeylib.exceptions import (
    DecodeError, OpenError, SeekError, TimestampNotFoundError)

__all__ = ('build_base64_unit', 'dearmor_extract_timestamp',
           'extract_timestamp', 'extract_timestamp_from_path',
           'is_armored', 'raw_extract_timestamp')


# -----BEGIN PGP PUBLIC KEY BLOCK-----
ARMOR_PREFIX = b'-----'
# GnuPG and Sequoia both wrap the armor at 64 columns.
ARMOR_LINE_WIDTH = 64
# Room for the payload and a CRLF. Longer lines get cut off and skipped.
ARMOR_LINE_LIMIT = ARMOR_LINE_WIDTH + 2

TIMESTAMP_SIZE = 4
# Tag, length and version octets precede the timestamp.
RAW_TIMESTAMP_OFFSET = 3
# Those same three octets are four base64 characters.
ARMOR_TIMESTAMP_OFFSET = 4
# Six characters carry 36 bits; padded to a full quantum they decode to
# exactly four bytes.
ARMOR_TIMESTAMP_CHARS = 6


def get_int4(data, offset):
    """
    Pull four bytes from data at offset and return as an integer.
    """
    return ((data[offset] << 24) + (data[offset + 1] << 16)
            + (data[offset + 2] << 8) + data[offset + 3])


def is_armored(header):
    return header[:len(ARMOR_PREFIX)] == ARMOR_PREFIX


def raw_extract_timestamp(fp):
    """
    Return the four timestamp bytes of a binary key, in file order.
    """
    seek_to(fp, RAW_TIMESTAMP_OFFSET)
    return read_exactly(fp, TIMESTAMP_SIZE)


def build_base64_unit(line):
    """
    Take the timestamp characters from an armored payload line and close
    them off with '=='. The result is a complete 8-character base64 quantum
    pair decoding to the four timestamp bytes, whatever followed them on
    the line.
    """
    start = ARMOR_TIMESTAMP_OFFSET
    return line[start:start + ARMOR_TIMESTAMP_CHARS] + b'=='


def is_payload_line(line):
    # Skip "-----BEGIN/END PGP ... KEY BLOCK-----" and the "Comment:",
    # "Version:" and similar armor headers.
    if b'-' in line or b':' in line:
        return False
    return len(line.rstrip(b'\r\n')) == ARMOR_LINE_WIDTH


def dearmor_extract_timestamp(fp):
    """
    Return the four timestamp bytes of an ASCII-armored key.
    """
    seek_to(fp, 0)
    for line in iter_bounded_lines(fp, ARMOR_LINE_LIMIT):
        if not is_payload_line(line):
            continue

        unit = build_base64_unit(line)
        try:
            timestamp = Base64StepDecoder().decode(unit)
        except BinasciiError as e:
            raise DecodeError(unit.decode('ascii', 'replace'), e)
        if len(timestamp) != TIMESTAMP_SIZE:
            raise DecodeError(unit.decode('ascii', 'replace'))
        return timestamp

    raise TimestampNotFoundError()


def extract_timestamp(fp):
    """
    Return the creation time of the key in the seekable binary file fp as
    an integer.
    """
    if not can_seek(fp):
        raise SeekError('key file is not seekable')

    seek_to(fp, 0)
    header = read_exactly(fp, len(ARMOR_PREFIX))
    if is_armored(header):
        timestamp = dearmor_extract_timestamp(fp)
    else:
        timestamp = raw_extract_timestamp(fp)

    # Stored in network byte order.
    return get_int4(timestamp, 0)


def extract_timestamp_from_path(path):
    try:
        fp = open(path, 'rb')
    except IOError as e:
        raise OpenError(path, e.strerror or str(e))
    with fp:
        return extract_timestamp(fp)
