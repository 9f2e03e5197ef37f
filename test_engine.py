from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import pyzipper

from zipkit.constants import EM_AES_256, EM_NONE
from zipkit.encryption import ENCRYPTION_SUPPORTED
from zipkit.engine import EntryStat, PyzipperEngine
from zipkit.errors import EngineError


class PyzipperEngineTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.path = str(self.tmp / "engine.zip")

    def tearDown(self):
        self._tmp.cleanup()

    def _fresh(self) -> PyzipperEngine:
        return PyzipperEngine.open_for_write(self.path, False)

    def test_nothing_written_before_close(self):
        engine = self._fresh()
        engine.insert("a.txt", b"alpha")
        self.assertFalse(Path(self.path).exists())
        self.assertTrue(engine.close())
        with pyzipper.AESZipFile(self.path) as zf:
            self.assertEqual(b"alpha", zf.read("a.txt"))

    def test_open_for_write_existing(self):
        Path(self.path).write_bytes(b"")
        with self.assertRaises(FileExistsError):
            PyzipperEngine.open_for_write(self.path, False)
        self.assertIsInstance(PyzipperEngine.open_for_write(self.path, True), PyzipperEngine)

    def test_open_for_read_rejects_garbage(self):
        Path(self.path).write_bytes(b"not a zip at all")
        with self.assertRaises(EngineError):
            PyzipperEngine.open_for_read(self.path)

    def test_stat_and_count(self):
        engine = self._fresh()
        engine.insert_dir("docs")
        engine.insert("docs/a.txt", b"a" * 100)
        engine.set_entry_compression("docs/a.txt", True)
        self.assertEqual(2, engine.entry_count())

        stat = engine.stat_index(0)
        self.assertEqual("docs/", stat.name)
        self.assertTrue(stat.is_dir)

        stat = engine.stat_index(1)
        self.assertIsInstance(stat, EntryStat)
        self.assertEqual(100, stat.size)
        self.assertEqual(100, stat.compressed_size)
        self.assertEqual(EM_NONE, stat.encryption_method)
        self.assertIsNone(engine.stat_index(2))
        self.assertIsNone(engine.stat_index(-1))

    def test_insert_dir_is_idempotent(self):
        engine = self._fresh()
        engine.insert_dir("docs/")
        engine.insert_dir("docs")
        self.assertEqual(1, engine.entry_count())

    def test_delete_and_locate(self):
        engine = self._fresh()
        engine.insert("a.txt", b"a")
        self.assertTrue(engine.locate("a.txt"))
        self.assertTrue(engine.delete_entry("a.txt"))
        self.assertFalse(engine.locate("a.txt"))
        self.assertFalse(engine.delete_entry("a.txt"))
        self.assertEqual(0, engine.entry_count())

    def test_reopen_and_modify(self):
        engine = self._fresh()
        engine.insert("keep.txt", b"keep")
        engine.insert("drop.txt", b"drop")
        engine.insert("swap.txt", b"old")
        self.assertTrue(engine.close())

        engine = PyzipperEngine.open_for_read(self.path)
        self.assertEqual(3, engine.entry_count())
        self.assertTrue(engine.delete_entry("drop.txt"))
        engine.insert("swap.txt", b"new")
        engine.insert("new.txt", b"fresh")
        self.assertTrue(engine.close())

        with pyzipper.AESZipFile(self.path) as zf:
            self.assertEqual(["keep.txt", "swap.txt", "new.txt"], [i.filename for i in zf.infolist()])
            self.assertEqual(b"new", zf.read("swap.txt"))
            self.assertEqual(b"keep", zf.read("keep.txt"))

    def test_delete_several_from_existing(self):
        engine = self._fresh()
        for name in ("a.txt", "b.txt", "c.txt", "d.txt"):
            engine.insert(name, name.encode() * 50)
        self.assertTrue(engine.close())
        size_before = Path(self.path).stat().st_size

        engine = PyzipperEngine.open_for_read(self.path)
        self.assertTrue(engine.delete_entry("b.txt"))
        self.assertTrue(engine.delete_entry("d.txt"))
        self.assertTrue(engine.close())

        with pyzipper.AESZipFile(self.path) as zf:
            self.assertIsNone(zf.testzip())
            self.assertEqual(["a.txt", "c.txt"], zf.namelist())
            self.assertEqual(b"c.txt" * 50, zf.read("c.txt"))
        self.assertLess(Path(self.path).stat().st_size, size_before)
        self.assertEqual(2, PyzipperEngine.open_for_read(self.path).entry_count())

    def test_delete_and_readd_existing(self):
        engine = self._fresh()
        for name in ("a.txt", "b.txt", "c.txt"):
            engine.insert(name, name.encode())
        self.assertTrue(engine.close())

        engine = PyzipperEngine.open_for_read(self.path)
        engine.delete_entry("b.txt")
        engine.delete_entry("c.txt")
        engine.insert("a.txt", b"again")
        self.assertTrue(engine.close())

        with pyzipper.AESZipFile(self.path) as zf:
            self.assertEqual(["a.txt"], zf.namelist())
            self.assertEqual(b"again", zf.read("a.txt"))

    def test_open_error_message(self):
        Path(self.path).write_bytes(b"not a zip at all")
        with self.assertRaises(EngineError) as ctx:
            PyzipperEngine.open_for_read(self.path)
        self.assertNotIn("Error opening", str(ctx.exception))

    def test_closed_handle(self):
        engine = self._fresh()
        self.assertTrue(engine.close())
        with self.assertRaises(EngineError):
            engine.insert("a.txt", b"a")
        with self.assertRaises(EngineError):
            engine.entry_count()

    def test_unknown_entry(self):
        engine = self._fresh()
        with self.assertRaises(EngineError):
            engine.set_entry_compression("missing.txt", True)

    def test_extract_missing_name(self):
        engine = self._fresh()
        engine.insert("a.txt", b"a")
        self.assertFalse(engine.extract_all(str(self.tmp / "out"), ["b.txt"]))

    @unittest.skipUnless(ENCRYPTION_SUPPORTED, "pyzipper/PyCryptodomex AES support required")
    def test_pending_encrypted_entry_needs_password(self):
        engine = self._fresh()
        engine.insert("secret.txt", b"s3cr3t")
        engine.set_entry_encryption("secret.txt", EM_AES_256, "pw")
        self.assertEqual(EM_AES_256, engine.stat_index(0).encryption_method)
        out = self.tmp / "out"
        self.assertFalse(engine.extract_all(str(out)))
        engine.set_password("pw")
        self.assertTrue(engine.extract_all(str(out)))
        self.assertEqual(b"s3cr3t", (out / "secret.txt").read_bytes())

    @unittest.skipUnless(ENCRYPTION_SUPPORTED, "pyzipper/PyCryptodomex AES support required")
    def test_written_aes_entry_reports_encryption(self):
        engine = self._fresh()
        engine.insert("secret.txt", b"s3cr3t" * 10)
        engine.set_entry_encryption("secret.txt", EM_AES_256, "pw")
        self.assertTrue(engine.close())

        engine = PyzipperEngine.open_for_read(self.path)
        self.assertNotEqual(EM_NONE, engine.stat_index(0).encryption_method)
        with pyzipper.AESZipFile(self.path) as zf:
            self.assertEqual(b"s3cr3t" * 10, zf.read("secret.txt", pwd=b"pw"))


if __name__ == "__main__":
    unittest.main()
