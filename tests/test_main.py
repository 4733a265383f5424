"""Tests for the command line entry point."""

import os
import shutil
import struct
import tempfile
import unittest

import main
from saetext import AddressRange, AddressTable, FreeRegion

TABLE = AddressTable(
    ranges=(AddressRange(0x1010, 0x1018),),
    diff=0x1000,
    free_region=FreeRegion(0x1040, 0x1060),
)


class TestParseInputs(unittest.TestCase):
    """Tests for argument parsing."""

    def test_extract(self):
        args = main.parse_inputs().parse_args(["game.nds", "--extract"])
        self.assertEqual(args.filename, "game.nds")
        self.assertTrue(args.extract)
        self.assertFalse(args.patch)

    def test_patch_short_flag(self):
        args = main.parse_inputs().parse_args(["game.nds", "-p"])
        self.assertTrue(args.patch)

    def test_actions_exclusive(self):
        with self.assertRaises(SystemExit):
            main.parse_inputs().parse_args(["game.nds", "-e", "-p"])

    def test_action_required(self):
        with self.assertRaises(SystemExit):
            main.parse_inputs().parse_args(["game.nds"])


class TestMain(unittest.TestCase):
    """Tests for main exit statuses."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.temp_dir)
        self.image_path = os.path.join(self.temp_dir, "game.nds")
        image = bytearray(0x60)
        struct.pack_into("<I", image, 0x10, 0x1020)
        image[0x20:0x26] = b"Hello\x00"
        with open(self.image_path, "wb") as f:
            f.write(image)

    def _run(self, *argv):
        return main.main(main.parse_inputs().parse_args(list(argv)), TABLE)

    def test_missing_image(self):
        missing = os.path.join(self.temp_dir, "nothing.nds")
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(self._run(missing, "-e"), 1)

    def test_extract_then_patch(self):
        self.assertEqual(self._run(self.image_path, "-e"), 0)
        with open(self.image_path + ".sae", encoding="utf-8") as f:
            self.assertEqual(f.read(), "1010,Hello\n")
        self.assertEqual(self._run(self.image_path, "-p"), 0)
        with open(self.image_path, "rb") as f:
            patched = f.read()
        self.assertEqual(struct.unpack_from("<I", patched, 0x10)[0], 0x1040)
        self.assertEqual(patched[0x40:0x48], b"Hello\x00\x00\x00")

    def test_patch_without_sidecar(self):
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(self._run(self.image_path, "-p"), 1)

    def test_patch_too_much_text(self):
        with open(self.image_path + ".sae", "w", encoding="utf-8") as f:
            f.write("1010," + "a" * 40 + "\n")
        with open(self.image_path, "rb") as f:
            before = f.read()
        with self.assertLogs("main", level="ERROR") as logs:
            self.assertEqual(self._run(self.image_path, "-p"), 1)
        self.assertIn("not enough free space", logs.output[0])
        with open(self.image_path, "rb") as f:
            self.assertEqual(f.read(), before)


if __name__ == "__main__":
    unittest.main()
