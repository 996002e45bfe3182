"""
Unit tests for gitcsemver.config module
"""
import unittest
import tempfile
import os
import shutil
import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from gitcsemver.config import (
    load_config,
    save_config,
    read_config_file,
    get_config_path,
    get_default_config,
    get_example_config,
    merge_configs,
    apply_env_overrides,
    options_from_config,
)
from gitcsemver.domain import CIBranchVersionMode, PossibleVersionsMode
from gitcsemver.exit_codes import ConfigError


def clean_environ():
    """os.environ without GITCSEMVER_* variables."""
    return {k: v for k, v in os.environ.items() if not k.startswith('GITCSEMVER_')}


class TestConfigManagement(unittest.TestCase):
    """Test configuration loading and saving"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, clean_environ(), clear=True)
        self.env.start()

    def tearDown(self):
        """Clean up test environment"""
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()
        self.assertIsNone(config['starting_version_for_csemver'])
        self.assertEqual(config['remote_name'], 'origin')
        self.assertEqual(config['possible_versions_mode'], 'Restricted')
        self.assertTrue(config['check_existing_versions'])
        self.assertEqual(config['branches'], [])

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        config = load_config(self.temp_dir)
        self.assertEqual(config, get_default_config())

    def test_load_config_json_file(self):
        """Test loading config from JSON file"""
        config_data = {
            'starting_version_for_csemver': 'v1.0.0',
            'branches': [{'name': 'develop', 'ci_version_mode': 'ZeroTimed'}],
        }
        with open(Path(self.temp_dir) / 'gitcsemver.json', 'w') as f:
            json.dump(config_data, f)

        config = load_config(self.temp_dir)
        self.assertEqual(config['starting_version_for_csemver'], 'v1.0.0')
        self.assertEqual(config['branches'][0]['name'], 'develop')
        # Defaults are kept
        self.assertEqual(config['remote_name'], 'origin')

    def test_load_config_toml_file(self):
        """Test loading config from TOML file"""
        (Path(self.temp_dir) / 'gitcsemver.toml').write_text(
            'single_major = 2\n'
            '[[branches]]\n'
            'name = "develop"\n'
            'ci_version_mode = "LastReleaseBased"\n'
        )
        config = load_config(self.temp_dir)
        self.assertEqual(config['single_major'], 2)
        self.assertEqual(config['branches'][0]['ci_version_mode'], 'LastReleaseBased')

    def test_load_config_invalid_file(self):
        """Test that an unreadable file falls back to defaults"""
        (Path(self.temp_dir) / 'gitcsemver.json').write_text('{ not json')
        with self.assertLogs('gitcsemver', level='ERROR'):
            config = load_config(self.temp_dir)
        self.assertEqual(config, get_default_config())

    def test_config_env_path(self):
        """Test GITCSEMVER_CONFIG"""
        path = Path(self.temp_dir) / 'elsewhere.yaml'
        path.write_text('remote_name: upstream\n')
        os.environ['GITCSEMVER_CONFIG'] = str(path)
        config = load_config(None)
        self.assertEqual(config['remote_name'], 'upstream')

    def test_env_overrides(self):
        """Test environment variable overrides"""
        os.environ['GITCSEMVER_IGNORE_DIRTY_WORKING_FOLDER'] = 'true'
        os.environ['GITCSEMVER_SINGLE_MAJOR'] = '3'
        os.environ['GITCSEMVER_STARTING_BRANCH_NAME'] = 'develop'
        os.environ['GITCSEMVER_BRANCHES'] = 'ignored'
        os.environ['GITCSEMVER_UNKNOWN'] = 'x'

        config = apply_env_overrides(get_default_config())
        self.assertIs(config['ignore_dirty_working_folder'], True)
        self.assertEqual(config['single_major'], 3)
        self.assertEqual(config['starting_branch_name'], 'develop')
        self.assertEqual(config['branches'], [])
        self.assertNotIn('unknown', config)

    def test_save_config_toml(self):
        """Test saving config to TOML drops null values"""
        path = Path(self.temp_dir) / 'gitcsemver.toml'
        saved = save_config(get_example_config(), path)
        self.assertEqual(saved, path)
        data = read_config_file(path)
        self.assertNotIn('single_major', data)
        self.assertEqual(data['branches'][0]['name'], 'develop')

    def test_save_config_yaml(self):
        """Test saving config to YAML"""
        path = Path(self.temp_dir) / 'sub' / 'gitcsemver.yaml'
        save_config({'remote_name': 'origin', 'single_major': None}, path)
        with open(path) as f:
            self.assertEqual(yaml.safe_load(f), {'remote_name': 'origin'})

    def test_merge_configs(self):
        """Test recursive merge"""
        merged = merge_configs({'a': {'x': 1, 'y': 2}, 'b': 1}, {'a': {'y': 3}, 'c': 4})
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4})


class TestConfigDiscovery:
    """Tests for get_config_path() on a fake filesystem."""

    @pytest.fixture(autouse=True)
    def no_config_env(self, monkeypatch):
        monkeypatch.delenv('GITCSEMVER_CONFIG', raising=False)

    def test_no_file(self, fs):
        """Test a repository without options file."""
        fs.create_dir('/repo')
        assert get_config_path('/repo') is None
        assert get_config_path(None) is None

    def test_plain_name_before_dot_name(self, fs):
        """Test that gitcsemver.* wins over .gitcsemver.*."""
        fs.create_file('/repo/.gitcsemver.json', contents='{}')
        fs.create_file('/repo/gitcsemver.yaml', contents='{}')
        assert get_config_path('/repo') == Path('/repo/gitcsemver.yaml')

    def test_dot_name(self, fs):
        """Test a hidden options file."""
        fs.create_file('/repo/.gitcsemver.yml', contents='only_patch: true\n')
        assert get_config_path('/repo') == Path('/repo/.gitcsemver.yml')
        assert load_config('/repo')['only_patch'] is True

    def test_missing_env_path(self, fs, monkeypatch):
        """Test GITCSEMVER_CONFIG pointing to a missing file."""
        fs.create_file('/repo/gitcsemver.json', contents='{}')
        monkeypatch.setenv('GITCSEMVER_CONFIG', '/missing.json')
        assert get_config_path('/repo') == Path('/repo/gitcsemver.json')


class TestOptionsFromConfig:
    """Tests for options_from_config()."""

    def test_defaults(self):
        """Test options built from the default configuration."""
        options = options_from_config(get_default_config())
        assert options.remote_name == 'origin'
        assert options.possible_versions_mode == PossibleVersionsMode.RESTRICTED
        assert options.branches == []
        assert options.check_existing_versions is True

    def test_branches(self):
        """Test branch options and their modes."""
        config = get_default_config()
        config['branches'] = [
            {'name': 'develop', 'version_name': 'dev', 'ci_version_mode': 'last_release_based'},
            {'name': 'master'},
        ]
        options = options_from_config(config)
        assert options.branches[0].ci_version_mode == CIBranchVersionMode.LAST_RELEASE_BASED
        assert options.branches[0].effective_version_name == 'dev'
        assert options.branches[1].ci_version_mode == CIBranchVersionMode.NONE
        assert options.find_branch(['master']) is None
        assert options.find_branch(['develop']).name == 'develop'

    def test_values(self):
        """Test scalar values."""
        config = get_default_config()
        config.update({
            'starting_version_for_csemver': 'v2.0.0',
            'single_major': 2,
            'possible_versions_mode': 'AllSuccessors',
            'ignore_modified_files': ['a.txt', 'a.txt'],
            'overridden_tags': {'head': ['v2.0.1']},
        })
        options = options_from_config(config)
        assert options.starting_version_for_csemver == 'v2.0.0'
        assert options.single_major == 2
        assert not options.possible_versions_mode.is_strict
        assert options.ignore_modified_files == {'a.txt'}
        assert options.overridden_tags == {'head': ['v2.0.1']}

    def test_quoted_booleans(self):
        """Test boolean options written as strings or as 0/1."""
        config = get_default_config()
        config.update({
            'only_patch': 'false',
            'ignore_dirty_working_folder': 'Yes',
            'check_existing_versions': 0,
        })
        options = options_from_config(config)
        assert options.only_patch is False
        assert options.ignore_dirty_working_folder is True
        assert options.check_existing_versions is False

    def test_errors(self):
        """Test invalid configurations."""
        for key, value in (
            ('only_patch', 'maybe'),
            ('check_existing_versions', 2),
            ('branches', [{'ci_version_mode': 'ZeroTimed'}]),
            ('branches', [{'name': 'develop', 'ci_version_mode': 'Sometimes'}]),
            ('possible_versions_mode', 'Most'),
            ('single_major', 'two'),
            ('overridden_tags', ['v1.0.0']),
        ):
            config = get_default_config()
            config[key] = value
            with pytest.raises(ConfigError):
                options_from_config(config)

    def test_to_dict(self):
        """Test that options serialize back to configuration keys."""
        options = options_from_config(get_example_config())
        d = options.to_dict()
        assert set(d) == set(get_default_config())
        assert d['branches'][0]['ci_version_mode'] == 'LastReleaseBased'
