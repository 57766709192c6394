"""
Tests for wtutils utilities.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from wtutils.core import AlreadyExistsError
from wtutils.utils.naming import branch_to_dir, dir_to_branch, is_round_trip_safe
from wtutils.utils.fs import (
    refresh_symlink,
    residual_entries,
    visible_entries,
    unique_destination
)


class TestNaming(unittest.TestCase):
    """Test branch <-> directory name mapping."""

    def test_branch_to_dir_replaces_slashes(self):
        """Test every slash becomes the reserved token."""
        self.assertEqual(branch_to_dir('feature/foo'), 'feature__foo')
        self.assertEqual(branch_to_dir('user/team/fix'), 'user__team__fix')

    def test_branch_without_slash_unchanged(self):
        """Test plain branch names map to themselves."""
        self.assertEqual(branch_to_dir('main'), 'main')
        self.assertEqual(dir_to_branch('main'), 'main')

    def test_dir_to_branch(self):
        """Test directory names decode back to branch names."""
        self.assertEqual(dir_to_branch('feature__foo'), 'feature/foo')
        self.assertEqual(dir_to_branch('user__team__fix'), 'user/team/fix')

    def test_round_trip(self):
        """Test decode(encode(b)) == b for names without the reserved token."""
        for branch in ['main', 'feature/x', 'a/b/c', 'release/1.2.3', 'fix-typo', 'x_y', 'a/_b']:
            self.assertTrue(is_round_trip_safe(branch))
            self.assertEqual(dir_to_branch(branch_to_dir(branch)), branch)

    def test_reserved_token_collision(self):
        """Test branch names containing '__' are reported as unsafe."""
        self.assertFalse(is_round_trip_safe('my__branch'))
        self.assertEqual(dir_to_branch(branch_to_dir('my__branch')), 'my/branch')


class TestFilesystemUtils(unittest.TestCase):
    """Test task directory filesystem helpers."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)

    def test_refresh_symlink_creates_link(self):
        """Test a missing link is created."""
        target = self.temp_path / 'target'
        target.mkdir()
        link = self.temp_path / 'link'

        refresh_symlink(link, target)

        self.assertTrue(link.is_symlink())
        self.assertEqual(os.readlink(link), str(target))

    def test_refresh_symlink_replaces_existing_link(self):
        """Test an existing link is repointed."""
        old_target = self.temp_path / 'old'
        new_target = self.temp_path / 'new'
        old_target.mkdir()
        new_target.mkdir()
        link = self.temp_path / 'link'
        os.symlink(str(old_target), str(link))

        refresh_symlink(link, new_target)

        self.assertEqual(os.readlink(link), str(new_target))

    def test_refresh_symlink_replaces_dangling_link(self):
        """Test a dangling link is replaced."""
        link = self.temp_path / 'link'
        os.symlink(str(self.temp_path / 'gone'), str(link))
        target = self.temp_path / 'target'
        target.mkdir()

        refresh_symlink(link, target)

        self.assertEqual(os.readlink(link), str(target))

    def test_refresh_symlink_keeps_real_directory(self):
        """Test a real directory in place of the link is left alone."""
        target = self.temp_path / 'target'
        target.mkdir()
        link = self.temp_path / 'link'
        link.mkdir()
        (link / 'notes.txt').write_text('keep')

        with self.assertRaises(AlreadyExistsError):
            refresh_symlink(link, target)

        self.assertFalse(link.is_symlink())
        self.assertEqual((link / 'notes.txt').read_text(), 'keep')

    def test_residual_entries_ignores_platform_metadata(self):
        """Test .DS_Store does not count as leftover content."""
        (self.temp_path / '.DS_Store').write_text('')
        self.assertEqual(residual_entries(self.temp_path), [])

        (self.temp_path / 'notes.txt').write_text('todo')
        (self.temp_path / '.scratch').write_text('')
        self.assertEqual(residual_entries(self.temp_path), ['.scratch', 'notes.txt'])

    def test_visible_entries_skips_hidden(self):
        """Test hidden entries are skipped and the rest sorted."""
        (self.temp_path / 'b').mkdir()
        (self.temp_path / 'a').write_text('')
        (self.temp_path / '.hidden').write_text('')

        self.assertEqual(visible_entries(self.temp_path), ['a', 'b'])

    def test_unique_destination_free(self):
        """Test a free destination is returned unchanged."""
        destination = self.temp_path / 'task'
        self.assertEqual(unique_destination(destination), destination)

    def test_unique_destination_appends_suffix(self):
        """Test collisions get the first free .N suffix."""
        destination = self.temp_path / 'task'
        destination.mkdir()
        self.assertEqual(unique_destination(destination), self.temp_path / 'task.1')

        (self.temp_path / 'task.1').mkdir()
        (self.temp_path / 'task.2').mkdir()
        self.assertEqual(unique_destination(destination), self.temp_path / 'task.3')


if __name__ == '__main__':
    unittest.main()
