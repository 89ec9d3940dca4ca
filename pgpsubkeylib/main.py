#!/usr/bin/env python
# vim: set ts=8 sw=4 sts=4 et ai tw=79:
"""
get-compatible-pgp-subkeys -- Sort generated PGP (sub)keys by creation time
Copyright (C) 2024  Walter Doekes <wdoekes>, OSSO B.V.

    This application is free software; you can redistribute it and/or modify
    it under the terms of the GNU Lesser General Public License as published
    by the Free Software Foundation; either version 3 of the License, or (at
    your option) any later version.

    This application is distributed in the hope that it will be useful, but
    WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
    Lesser General Public License for more details.

    You should have received a copy of the GNU Lesser General Public
    License along with this application; if not, write to the Free Software
    Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA 02111-1307,
    USA.
"""
import os
import sys
from getopt import GetoptError, gnu_getopt

from pgpsubkeylib import VERSION_STRING
from pgpsubkeylib.classify import KeyClassifier, describe
from pgpsubkeylib.exceptions import KeyReadError, SubkeyException, UserError
from pgpsubkeylib.keytime import extract_timestamp_from_path


RCFILE_ENV = 'PGPSUBKEYS_RC'
RCFILE_NAME = '.pgpsubkeysrc'


def get_rcfile_path():
    if os.environ.get(RCFILE_ENV):
        return os.environ[RCFILE_ENV]
    return os.path.join(os.path.expanduser('~'), RCFILE_NAME)


def parse_rcfile():
    '''
    Read ~/.pgpsubkeysrc (or $PGPSUBKEYS_RC) for default arguments. A
    missing or unreadable file means no defaults.
    '''
    rc_args, file = [], None
    try:
        file = open(get_rcfile_path(), 'r', encoding='utf-8')
        rc_args.extend(file.read().split())
    except (IOError, UnicodeDecodeError):
        pass
    finally:
        if file:
            file.close()
    return rc_args


def parse_options(args):
    '''
    Parse command line options, with default options read from the rc file
    prefixed. Returns (command, positional_args, config).
    '''
    rc_args = parse_rcfile()

    try:
        optlist, args = gnu_getopt(
            [args[0]] + rc_args + args[1:],  # inject defaults
            'hVnq',
            ('help', 'version', 'dry-run', 'quiet'))
    except GetoptError as e:
        raise UserError(str(e))

    config = {
        'dry_run': False,
        'quiet': False,
    }

    command = None
    for option, arg in optlist:
        if option in ('--help', '-h'):
            command = 'help'  # always allow -h
        elif option in ('--version', '-V'):
            if command != 'help':
                command = 'version'
        elif option in ('--dry-run', '-n'):
            config['dry_run'] = True
        elif option in ('--quiet', '-q'):
            config['quiet'] = True
        else:
            raise NotImplementedError('Unhandled option', option)

    return command, args[1:], config  # drop argv0


def print_usage(progname, file=None):
    (file or sys.stdout).write('''\
Usage: %(progname)s [-nq] <SOURCE_DIRECTORY> [<PRIMARY_PGP_KEY> \
<DESTINATION_DIRECTORY>]

Passing a source directory with no other arguments opens each PGP key and
prints its creation timestamp. Further specifying a primary PGP key and
destination directory will move each PGP key if its creation timestamp is
equal to or greater than that of the primary PGP key.

Both raw and ASCII-armored PGP keys are supported.

Options:
  --dry-run, -n         Report compatible keys, but do not move them
  --quiet, -q           Only report timestamps, warnings and errors
  --help, -h            Show help and exit
  --version, -V         Print version

Default options are read from ~/%(rcfile)s (or $%(rcenv)s).
''' % {'progname': progname, 'rcfile': RCFILE_NAME, 'rcenv': RCFILE_ENV})


def run_version():
    print('get-compatible-pgp-subkeys %s' % (VERSION_STRING,))


def run_classify(args, config):
    source_dir = args[0]
    primary_timestamp = dest_dir = None

    if len(args) == 3:
        primary_path, dest_dir = args[1], args[2]
        try:
            primary_timestamp = extract_timestamp_from_path(primary_path)
        except KeyReadError as e:
            raise UserError('failed to read from primary PGP key',
                            describe(e))
        if not os.path.isdir(dest_dir):
            raise UserError('destination is not a directory', dest_dir)
        if not config['quiet']:
            sys.stderr.write('INFO: Primary PGP key timestamp: %d\n' % (
                primary_timestamp,))

    classifier = KeyClassifier(
        source_dir, primary_timestamp=primary_timestamp, dest_dir=dest_dir,
        dry_run=config['dry_run'], quiet=config['quiet'])
    return classifier.run()


def get_compatible_pgp_subkeys(args):
    '''
    Run the CLI with argv-style args. Returns the exit status; fatal errors
    are raised as SubkeyException.
    '''
    progname = os.path.basename(args[0])
    command, args, config = parse_options(args)

    if command == 'help':
        print_usage(progname)
        return 0
    elif command == 'version':
        run_version()
        return 0

    if len(args) not in (1, 3):
        print_usage(progname, file=sys.stderr)
        return 1

    run_classify(args, config)
    return 0


def main():
    try:
        status = get_compatible_pgp_subkeys(sys.argv)
    except KeyboardInterrupt:
        sys.exit(130)  # 128+SIGINT
    except SubkeyException as e:
        sys.stderr.write(describe(e) + '\n')
        sys.exit(1)
    sys.exit(status)


if __name__ == '__main__':
    main()
