"""
Tests for tree discovery and default branch resolution.
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from wtutils.config import WorktreeConfig
from wtutils.locator import RepositoryLocator
from wtutils.resolver import DefaultRefResolver, strip_remote_prefix


def make_config(base: Path, overrides=None) -> WorktreeConfig:
    return WorktreeConfig.create(base / 'worktrees', base / 'tasks', None, overrides or {})


class TestRepositoryLocator(unittest.TestCase):
    """Test RepositoryLocator."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)
        self.config = make_config(self.temp_path)
        self.locator = RepositoryLocator(self.config)

    def test_missing_base_lists_nothing(self):
        """Test an absent worktree base is an empty listing, not an error."""
        self.assertEqual(list(self.locator.list_trees()), [])

    def test_lists_only_initialized_trees(self):
        """Test only directories holding a .bare store are listed."""
        base = self.config.worktree_base
        (base / 'api' / '.bare').mkdir(parents=True)
        (base / 'web' / '.bare').mkdir(parents=True)
        (base / 'scratch').mkdir()
        (base / 'broken').mkdir()
        (base / 'broken' / '.bare').write_text('not a directory')
        (base / 'notes.txt').write_text('')

        self.assertEqual(sorted(self.locator.list_trees()), ['api', 'web'])

    def test_listing_is_restartable(self):
        """Test each iteration rescans the base directory."""
        base = self.config.worktree_base
        (base / 'api' / '.bare').mkdir(parents=True)
        self.assertEqual(list(self.locator), ['api'])

        (base / 'web' / '.bare').mkdir(parents=True)
        self.assertEqual(sorted(self.locator), ['api', 'web'])

    def test_is_initialized(self):
        """Test initialization is decided by .bare being a directory."""
        base = self.config.worktree_base
        (base / 'api' / '.bare').mkdir(parents=True)
        (base / 'web').mkdir()

        self.assertTrue(self.locator.is_initialized('api'))
        self.assertFalse(self.locator.is_initialized('web'))
        self.assertFalse(self.locator.is_initialized('missing'))

    def test_paths(self):
        """Test tree and bare store paths."""
        base = self.config.worktree_base
        self.assertEqual(self.locator.tree_path('api'), base / 'api')
        self.assertEqual(self.locator.bare_path('api'), base / 'api' / '.bare')


class TestDefaultRefResolver(unittest.TestCase):
    """Test DefaultRefResolver precedence."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)
        (self.temp_path / 'worktrees' / 'api' / '.bare').mkdir(parents=True)

    def test_strip_remote_prefix(self):
        """Test the remote-tracking prefix is removed."""
        self.assertEqual(strip_remote_prefix('refs/remotes/origin/main\n'), 'main')
        self.assertEqual(strip_remote_prefix('refs/remotes/origin/release/2'), 'release/2')

    @patch('wtutils.resolver.git_output')
    def test_override_dominates_remote_head(self, mock_output):
        """Test a configured override wins regardless of remote state."""
        mock_output.return_value = 'refs/remotes/origin/main'
        resolver = DefaultRefResolver(make_config(self.temp_path, {'api': 'develop'}))

        self.assertEqual(resolver.resolve('api'), 'develop')
        self.assertEqual(resolver.resolve('API'), 'develop')
        mock_output.assert_not_called()

    @patch('wtutils.resolver.git_output')
    def test_remote_head(self, mock_output):
        """Test origin/HEAD from the bare store is used without an override."""
        mock_output.return_value = 'refs/remotes/origin/trunk'
        resolver = DefaultRefResolver(make_config(self.temp_path))

        self.assertEqual(resolver.resolve('api'), 'trunk')
        bare = self.temp_path / 'worktrees' / 'api' / '.bare'
        mock_output.assert_called_once_with(bare, 'symbolic-ref', 'refs/remotes/origin/HEAD')

    @patch('wtutils.resolver.git_output')
    def test_fallback_to_main(self, mock_output):
        """Test 'main' when there is no override and no origin/HEAD."""
        mock_output.return_value = None
        resolver = DefaultRefResolver(make_config(self.temp_path))
        self.assertEqual(resolver.resolve('api'), 'main')

    @patch('wtutils.resolver.git_output')
    def test_uninitialized_tree_falls_back_without_git(self, mock_output):
        """Test no git query is made for a tree without a bare store."""
        resolver = DefaultRefResolver(make_config(self.temp_path))
        self.assertEqual(resolver.resolve('missing'), 'main')
        mock_output.assert_not_called()


if __name__ == '__main__':
    unittest.main()
