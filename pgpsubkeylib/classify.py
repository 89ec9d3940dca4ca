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
import os
import sys
from stat import S_ISDIR, S_ISREG

from pgpsubkeylib.exceptions import KeyReadError, OpenError, RelocateError
from pgpsubkeylib.keytime import extract_timestamp_from_path

__all__ = ('ClassifyResult', 'KeyClassifier', 'is_compatible')


def is_compatible(timestamp, primary_timestamp):
    """
    A subkey cannot be older than its primary key. GnuPG accepts a subkey
    with the exact same creation time as its primary key.
    """
    return timestamp >= primary_timestamp


def describe(exception):
    return ': '.join(str(i) for i in exception.args)


class ClassifyResult(object):
    def __init__(self):
        self.timestamps = {}    # name => timestamp
        self.moved = []
        self.failed = []        # extraction or relocation failed
        self.skipped = []       # not a candidate (hidden, empty, no stat)

    def __repr__(self):
        return '<%s: %d keys, %d moved, %d failed, %d skipped>' % (
            self.__class__.__name__, len(self.timestamps), len(self.moved),
            len(self.failed), len(self.skipped))


class KeyClassifier(object):
    """
    Walk over the keys in source_dir and print their creation times. If a
    primary_timestamp and dest_dir are given, keys that are compatible with
    (not older than) the primary key are moved to dest_dir.
    """
    def __init__(self, source_dir, primary_timestamp=None, dest_dir=None,
                 dry_run=False, quiet=False, stdout=None, stderr=None):
        if (primary_timestamp is None) != (dest_dir is None):
            raise TypeError('pass both primary_timestamp and dest_dir or '
                            'neither')
        self.source_dir = source_dir
        self.primary_timestamp = primary_timestamp
        self.dest_dir = dest_dir
        self.dry_run = dry_run
        self.quiet = quiet
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    @property
    def compare(self):
        return self.primary_timestamp is not None

    def info(self, message):
        if not self.quiet:
            self.stderr.write('INFO: %s\n' % (message,))

    def warning(self, message):
        self.stderr.write('WARNING: %s\n' % (message,))

    def candidates(self, result):
        """
        Yield (name, path) for every regular, non-empty, non-hidden file in
        the source directory. The order is whatever the OS lists.
        """
        try:
            with os.scandir(self.source_dir) as iterator:
                entries = list(iterator)
        except IOError as e:
            raise OpenError(self.source_dir, e.strerror or str(e))

        for entry in entries:
            # Editor swap files, .gnupg leftovers and the like.
            if entry.name.startswith('.'):
                result.skipped.append(entry.name)
                continue

            try:
                st = entry.stat()
            except IOError:
                self.warning('unable to stat file: %s' % (entry.path,))
                result.skipped.append(entry.name)
                continue

            if S_ISDIR(st.st_mode):
                continue
            # Fifos would block on open; sockets cannot be read at all.
            if not S_ISREG(st.st_mode):
                result.skipped.append(entry.name)
                continue

            # A key generator that got killed halfway leaves these behind.
            if st.st_size == 0:
                result.skipped.append(entry.name)
                continue

            yield entry.name, entry.path

    def relocate(self, name, path):
        dest_path = os.path.join(self.dest_dir, name)
        try:
            os.rename(path, dest_path)
        except IOError as e:
            raise RelocateError(path, e.strerror or str(e))
        return dest_path

    def classify(self, name, path, result):
        self.info('Opening: %s' % (path,))
        try:
            timestamp = extract_timestamp_from_path(path)
        except KeyReadError as e:
            self.warning('skipping %s: %s' % (path, describe(e)))
            result.failed.append(name)
            return

        result.timestamps[name] = timestamp
        self.stdout.write('Timestamp: %d\n' % (timestamp,))

        if not self.compare or not is_compatible(
                timestamp, self.primary_timestamp):
            return

        if self.dry_run:
            self.info('Would move compatible PGP subkey: %s' % (path,))
            return

        self.info('Moving compatible PGP subkey: %s' % (path,))
        try:
            self.relocate(name, path)
        except RelocateError as e:
            self.warning(describe(e))
            result.failed.append(name)
        else:
            result.moved.append(name)

    def run(self):
        result = ClassifyResult()
        for name, path in self.candidates(result):
            self.classify(name, path, result)
        return result
