import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from spoiler_config import ConfigurationInvalid, SpoilerConfig
from spoiler_io import RecordingIO, SpoilerIO
from spoiler_rewriter import DomShape, media_dom_for


class TestSpoilerConfig(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.test_dir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        config = SpoilerConfig()
        self.assertTrue(config.enable_mark)
        self.assertFalse(config.legacy_media_dom)
        self.assertEqual(config.default_mode, "")
        self.assertEqual(config.language, "en")

    def test_load_merges_file_and_overrides(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"enable_mark": False, "default_mode": "hideall", "theme": "dark"}, f)
        config = SpoilerConfig.load(self.path, default_mode="noimg")
        self.assertFalse(config.enable_mark)
        self.assertEqual(config.default_mode, "noimg")
        self.assertIsNone(config.get("theme"))

    def test_load_missing_or_broken_file(self):
        self.assertTrue(SpoilerConfig.load(self.path).enable_mark)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("enable_mark = false")
        self.assertTrue(SpoilerConfig.load(self.path).enable_mark)

    def test_save_round_trip(self):
        config = SpoilerConfig(language="de")
        success, msg = config.save(os.path.join(self.test_dir, "nested", "config.json"))
        self.assertTrue(success, msg)
        reloaded = SpoilerConfig.load(os.path.join(self.test_dir, "nested", "config.json"))
        self.assertEqual(reloaded.language, "de")

    def test_unknown_option_rejected(self):
        with self.assertRaises(ConfigurationInvalid):
            SpoilerConfig(enable_marks=True)
        with self.assertRaises(ConfigurationInvalid):
            SpoilerConfig.load(self.path, colour="red")

    def test_legacy_dom_is_invalid(self):
        self.assertEqual(media_dom_for(SpoilerConfig()).shape, DomShape.MODERN)
        with self.assertRaises(ConfigurationInvalid):
            media_dom_for(SpoilerConfig(legacy_media_dom=True))

    def test_repr_hides_token(self):
        self.assertNotIn("secret", repr(SpoilerConfig(preference_token="secret")))


class TestSpoilerIO(unittest.TestCase):
    def test_log_event_format(self):
        io = RecordingIO()
        io.log_event("error", "Bad default", {"configured_default": "x", "valid_modes": ["showall"]})
        self.assertEqual(io.messages, [
            '[ERROR] MediaSpoiler: Bad default {"configured_default": "x", "valid_modes": ["showall"]}'
        ])
        self.assertEqual(io.events[0]["context"]["configured_default"], "x")

    def test_console_io_prints(self):
        with patch('builtins.print') as mock_print:
            SpoilerIO().log("hello")
        mock_print.assert_called_once_with("hello")


if __name__ == "__main__":
    unittest.main()
