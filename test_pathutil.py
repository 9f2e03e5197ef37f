from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from zipkit.pathutil import norm_path, to_slashes, walk_item


def _build_tree(root: Path):
    (root / "b.txt").write_text("b")
    (root / "a").mkdir()
    (root / "a" / "z.txt").write_text("z")
    (root / "a" / "inner").mkdir()
    (root / "a" / "inner" / "deep.txt").write_text("deep")
    (root / "empty").mkdir()


class PathUtilTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_norm_path(self):
        self.assertEqual("a/b/c.txt", norm_path("\\a\\b\\c.txt"))
        self.assertEqual("a/b", norm_path("./a//b/"))
        with self.assertRaises(ValueError):
            norm_path("a/../../etc/passwd")

    def test_to_slashes(self):
        self.assertEqual("C:/data/file.txt", to_slashes("C:\\data\\file.txt"))

    def test_file_uses_basename(self):
        target = self.tmp / "nested" / "file.txt"
        target.parent.mkdir()
        target.write_text("x")
        plan = walk_item(str(target))
        self.assertEqual(1, len(plan))
        self.assertEqual("file.txt", plan[0].name)
        self.assertFalse(plan[0].is_dir)

    def test_directory_preorder(self):
        root = self.tmp / "tree"
        root.mkdir()
        _build_tree(root)
        plan = walk_item(str(root))
        self.assertEqual(
            [
                ("a", True),
                ("a/inner", True),
                ("a/inner/deep.txt", False),
                ("a/z.txt", False),
                ("b.txt", False),
                ("empty", True),
            ],
            [(p.name, p.is_dir) for p in plan],
        )
        deep = [p for p in plan if p.name == "a/inner/deep.txt"][0]
        self.assertEqual("deep", Path(deep.source).read_text())

    def test_trailing_slash_on_directory(self):
        root = self.tmp / "tree"
        root.mkdir()
        _build_tree(root)
        self.assertEqual(
            [p.name for p in walk_item(str(root))],
            [p.name for p in walk_item(str(root) + "/")],
        )

    def test_empty_directory(self):
        root = self.tmp / "void"
        root.mkdir()
        self.assertEqual([], walk_item(str(root)))

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlinked_directory_not_descended(self):
        root = self.tmp / "tree"
        root.mkdir()
        _build_tree(root)
        try:
            os.symlink(str(root / "a"), str(root / "link"))
        except (OSError, NotImplementedError):
            self.skipTest("cannot create symlinks")
        names = [p.name for p in walk_item(str(root))]
        self.assertIn("link", names)
        self.assertNotIn("link/z.txt", names)

    def test_missing(self):
        with self.assertRaises(FileNotFoundError):
            walk_item(str(self.tmp / "missing"))


if __name__ == "__main__":
    unittest.main()
