"""
Unit tests for hashrarity.config module
"""
import unittest
import tempfile
import os
import shutil
import json
import logging
from pathlib import Path
from unittest.mock import patch

import toml
import yaml

from hashrarity.config import (
    load_config,
    save_config,
    get_config_path,
    get_default_config,
    get_thresholds,
    merge_configs,
    apply_env_overrides,
    configure_logging,
)
from hashrarity.domain import RarityThresholds
from hashrarity.exit_codes import ConfigError


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir})
        self.env.start()
        for key in [k for k in os.environ if k.startswith('HASHRARITY_')]:
            del os.environ[key]
        self.config_dir = Path(self.temp_dir) / '.hashrarity'

    def tearDown(self):
        """Clean up test environment"""
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()
        self.assertEqual(config['rarity'], {'common_bits': 8, 'uncommon_bits': 16})
        self.assertTrue(config['scan']['include_alternates'])
        self.assertFalse(config['scan']['keep_going'])
        self.assertIn('level', config['logging'])

    def test_default_config_path(self):
        """Without overrides the path is ~/.hashrarity/config.json"""
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')

    def test_config_path_from_env(self):
        """HASHRARITY_CONFIG points at an explicit file"""
        custom = Path(self.temp_dir) / 'custom.yaml'
        custom.write_text("rarity:\n  common_bits: 4\n")
        with patch.dict(os.environ, {'HASHRARITY_CONFIG': str(custom)}):
            self.assertEqual(get_config_path(), custom)
            self.assertEqual(load_config()['rarity']['common_bits'], 4)

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        self.assertEqual(load_config(), get_default_config())

    def test_load_config_json_file(self):
        """Test loading a partial JSON config over the defaults"""
        self.config_dir.mkdir()
        with open(self.config_dir / 'config.json', 'w') as f:
            json.dump({'rarity': {'uncommon_bits': 20}}, f)

        config = load_config()
        self.assertEqual(config['rarity']['uncommon_bits'], 20)
        self.assertEqual(config['rarity']['common_bits'], 8)

    def test_load_config_toml_file(self):
        """Test loading a TOML config"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.toml').write_text("[scan]\ninclude_alternates = false\n")
        self.assertFalse(load_config()['scan']['include_alternates'])

    def test_load_config_yaml_file(self):
        """Test loading a YAML config with the .yml suffix"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.yml').write_text("git:\n  timeout_seconds: 5\n")
        self.assertEqual(load_config()['git']['timeout_seconds'], 5)

    def test_broken_file_falls_back_to_defaults(self):
        """An unparsable file is logged and ignored"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text("{not json")
        with self.assertLogs('hashrarity', level='ERROR'):
            config = load_config()
        self.assertEqual(config, get_default_config())

    def test_save_config_formats(self):
        """Test that the suffix picks the written format"""
        config = get_default_config()
        for name, loader in [
            ('out.json', lambda p: json.loads(p.read_text())),
            ('out.toml', lambda p: toml.loads(p.read_text())),
            ('out.yaml', lambda p: yaml.safe_load(p.read_text())),
        ]:
            path = save_config(config, Path(self.temp_dir) / 'saved' / name)
            self.assertEqual(loader(path)['rarity'], config['rarity'])

    def test_save_config_default_path(self):
        """Test saving to the default location"""
        path = save_config(get_default_config())
        self.assertEqual(path, self.config_dir / 'config.json')
        self.assertTrue(path.exists())


class TestConfigHelpers(unittest.TestCase):
    """Merging, environment overrides and thresholds"""

    def test_merge_configs_nested(self):
        """Nested sections merge key by key"""
        merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'c': 5}})
        self.assertEqual(merged, {'a': {'b': 1, 'c': 5}, 'd': 3})

    def test_env_overrides(self):
        """Test integer and boolean coercion of env overrides"""
        env = {
            'HASHRARITY_RARITY_COMMON_BITS': '1',
            'HASHRARITY_SCAN_INCLUDE_ALTERNATES': 'off',
            'HASHRARITY_SCAN_KEEP_GOING': 'yes',
            'HASHRARITY_UNKNOWN_THING': 'ignored',
        }
        with patch.dict(os.environ, env):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['rarity']['common_bits'], 1)
        self.assertIs(config['scan']['include_alternates'], False)
        self.assertIs(config['scan']['keep_going'], True)
        self.assertNotIn('unknown', config)

    def test_env_cannot_replace_a_section(self):
        """A whole section cannot be replaced from the environment"""
        with patch.dict(os.environ, {'HASHRARITY_RARITY': '3'}):
            config = apply_env_overrides(get_default_config())
        self.assertIsInstance(config['rarity'], dict)

    def test_get_thresholds(self):
        """Explicit options take precedence over config values"""
        config = get_default_config()
        self.assertEqual(get_thresholds(config), RarityThresholds(8, 16))
        self.assertEqual(get_thresholds(config, common_bits=2), RarityThresholds(2, 16))
        self.assertEqual(get_thresholds(config, uncommon_bits=30), RarityThresholds(8, 30))

    def test_get_thresholds_invalid(self):
        """Invalid thresholds raise ConfigError"""
        config = merge_configs(get_default_config(), {'rarity': {'common_bits': 20}})
        with self.assertRaises(ConfigError):
            get_thresholds(config)
        with self.assertRaises(ConfigError):
            get_thresholds(get_default_config(), common_bits=9, uncommon_bits=3)

    def test_configure_logging(self):
        """Test level names, falling back to WARNING for unknown ones"""
        logger = logging.getLogger('hashrarity')
        original = logger.level
        try:
            configure_logging({'logging': {'level': 'debug'}})
            self.assertEqual(logger.level, logging.DEBUG)
            configure_logging({'logging': {'level': 'nonsense'}})
            self.assertEqual(logger.level, logging.WARNING)
        finally:
            logger.setLevel(original)


if __name__ == '__main__':
    unittest.main()
