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
from io import StringIO
import os
from tempfile import TemporaryDirectory
from unittest import TestCase, mock

from pgpsubkeylib import VERSION_STRING
from pgpsubkeylib.exceptions import OpenError, UserError
from pgpsubkeylib.main import (
    get_compatible_pgp_subkeys, main, parse_options, parse_rcfile)

from keydata import armor, make_raw_key


class CliTestCase(TestCase):
    def setUp(self):
        self._tmpdir = TemporaryDirectory()
        self.tmpdir = self._tmpdir.name
        self.source = os.path.join(self.tmpdir, 'source')
        self.dest = os.path.join(self.tmpdir, 'dest')
        os.mkdir(self.source)
        os.mkdir(self.dest)
        self.primary = os.path.join(self.tmpdir, 'primary.gpg')
        with open(self.primary, 'wb') as fp:
            fp.write(make_raw_key(0x656c1000))

        # Keep the developer's own rc file out of the tests.
        self.rcfile = os.path.join(self.tmpdir, 'pgpsubkeysrc')
        patcher = mock.patch.dict(os.environ, {'PGPSUBKEYS_RC': self.rcfile})
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self._tmpdir.cleanup()

    def write(self, name, data):
        with open(os.path.join(self.source, name), 'wb') as fp:
            fp.write(data)

    def run_cli(self, *args):
        with mock.patch('sys.stdout', new_callable=StringIO) as stdout, \
                mock.patch('sys.stderr', new_callable=StringIO) as stderr:
            status = get_compatible_pgp_subkeys(
                ['get-compatible-pgp-subkeys'] + list(args))
        return status, stdout.getvalue(), stderr.getvalue()


class OptionsTest(CliTestCase):
    def test_defaults(self):
        command, args, config = parse_options(['prog', 'dir'])
        self.assertIsNone(command)
        self.assertEqual(args, ['dir'])
        self.assertEqual(config, {'dry_run': False, 'quiet': False})

    def test_options_anywhere(self):
        command, args, config = parse_options(
            ['prog', 'src', '-q', 'primary', '--dry-run', 'dest'])
        self.assertEqual(args, ['src', 'primary', 'dest'])
        self.assertEqual(config, {'dry_run': True, 'quiet': True})

    def test_help_wins(self):
        command, args, config = parse_options(['prog', '-V', '-h'])
        self.assertEqual(command, 'help')

    def test_bad_option(self):
        self.assertRaises(UserError, parse_options, ['prog', '--frobnicate'])

    def test_rcfile(self):
        with open(self.rcfile, 'w') as fp:
            fp.write('--quiet\n')
        self.assertEqual(parse_rcfile(), ['--quiet'])
        command, args, config = parse_options(['prog', 'dir'])
        self.assertTrue(config['quiet'])

    def test_rcfile_missing(self):
        self.assertEqual(parse_rcfile(), [])

    def test_rcfile_not_utf8(self):
        with open(self.rcfile, 'wb') as fp:
            fp.write(b'--quiet \xff\xfe\n')
        self.assertEqual(parse_rcfile(), [])
        command, args, config = parse_options(['prog', 'dir'])
        self.assertEqual(args, ['dir'])


class CliTest(CliTestCase):
    def test_usage(self):
        for args in ((), ('a', 'b'), ('a', 'b', 'c', 'd')):
            status, stdout, stderr = self.run_cli(*args)
            self.assertEqual(status, 1)
            self.assertEqual(stdout, '')
            self.assertTrue(stderr.startswith(
                'Usage: get-compatible-pgp-subkeys '))

    def test_help(self):
        status, stdout, stderr = self.run_cli('--help')
        self.assertEqual(status, 0)
        self.assertIn('Both raw and ASCII-armored PGP keys are supported.',
                      stdout)

    def test_version(self):
        status, stdout, stderr = self.run_cli('-V')
        self.assertEqual(status, 0)
        self.assertEqual(stdout, 'get-compatible-pgp-subkeys %s\n' % (
            VERSION_STRING,))

    def test_list(self):
        self.write('key.asc', armor(make_raw_key(0x656c1000)))
        status, stdout, stderr = self.run_cli(self.source)
        self.assertEqual(status, 0)
        self.assertEqual(stdout, 'Timestamp: 1701580800\n')

    def test_compare_and_move(self):
        self.write('same.asc', armor(make_raw_key(0x656c1000, tag=0xb8)))
        self.write('older.asc', armor(make_raw_key(0x656c0fff, tag=0xb8)))
        self.write('broken.gpg', b'\x98')

        status, stdout, stderr = self.run_cli(
            self.source, self.primary, self.dest)

        self.assertEqual(status, 0)  # broken.gpg does not count
        self.assertEqual(os.listdir(self.dest), ['same.asc'])
        self.assertEqual(sorted(os.listdir(self.source)),
                         ['broken.gpg', 'older.asc'])
        self.assertIn('INFO: Primary PGP key timestamp: 1701580800\n',
                      stderr)
        self.assertEqual(sorted(stdout.splitlines()),
                         ['Timestamp: 1701580799', 'Timestamp: 1701580800'])

    def test_compare_dry_run_from_rcfile(self):
        with open(self.rcfile, 'w') as fp:
            fp.write('-n -q')
        self.write('same.asc', armor(make_raw_key(0x656c1000)))
        status, stdout, stderr = self.run_cli(
            self.source, self.primary, self.dest)
        self.assertEqual(status, 0)
        self.assertEqual(os.listdir(self.dest), [])
        self.assertEqual(stderr, '')

    def test_bad_primary(self):
        missing = os.path.join(self.tmpdir, 'missing.gpg')
        with self.assertRaises(UserError) as cm:
            self.run_cli(self.source, missing, self.dest)
        self.assertEqual(cm.exception.args[:2], (
            'user error', 'failed to read from primary PGP key'))

    def test_bad_dest(self):
        missing = os.path.join(self.tmpdir, 'missing')
        self.assertRaises(UserError, self.run_cli,
                          self.source, self.primary, missing)

    def test_bad_source(self):
        missing = os.path.join(self.tmpdir, 'missing')
        self.assertRaises(OpenError, self.run_cli, missing)


class MainTest(CliTestCase):
    def run_main(self, *args):
        argv = ['get-compatible-pgp-subkeys'] + list(args)
        with mock.patch('sys.argv', argv), \
                mock.patch('sys.stdout', new_callable=StringIO), \
                mock.patch('sys.stderr', new_callable=StringIO) as stderr:
            with self.assertRaises(SystemExit) as cm:
                main()
        return cm.exception.code, stderr.getvalue()

    def test_exit_ok(self):
        code, stderr = self.run_main(self.source)
        self.assertEqual(code, 0)

    def test_exit_usage(self):
        code, stderr = self.run_main()
        self.assertEqual(code, 1)

    def test_exit_bad_source(self):
        code, stderr = self.run_main(os.path.join(self.tmpdir, 'missing'))
        self.assertEqual(code, 1)
        self.assertTrue(stderr.startswith('key read error: '))

    def test_exit_bad_primary(self):
        code, stderr = self.run_main(
            self.source, os.path.join(self.tmpdir, 'missing.gpg'), self.dest)
        self.assertEqual(code, 1)
        self.assertTrue(stderr.startswith(
            'user error: failed to read from primary PGP key: '
            'key read error: '))

    def test_exit_interrupted(self):
        with mock.patch('pgpsubkeylib.main.get_compatible_pgp_subkeys',
                        side_effect=KeyboardInterrupt):
            code, stderr = self.run_main(self.source)
        self.assertEqual(code, 130)


class ImportTest(TestCase):
    def test_import_all_modules(self):
        import importlib
        for name in ('pgpsubkeylib.b64step', 'pgpsubkeylib.bytes',
                     'pgpsubkeylib.classify', 'pgpsubkeylib.exceptions',
                     'pgpsubkeylib.keytime', 'pgpsubkeylib.main'):
            module = importlib.import_module(name)
            for attr in getattr(module, '__all__', ()):
                self.assertTrue(hasattr(module, attr), (name, attr))
