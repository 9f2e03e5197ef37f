from __future__ import annotations

import unittest

from zipkit.fileobject import FileObject


def _sample() -> FileObject:
    return FileObject(
        name="Exception/ZipException.php",
        size=505,
        timestamp=1576567932,
        compressed_size=294,
        encrypted=False,
    )


class FileObjectTests(unittest.TestCase):
    def test_field_and_key_access(self):
        obj = _sample()
        self.assertEqual("Exception/ZipException.php", obj.name)
        self.assertEqual("Exception/ZipException.php", obj["name"])
        self.assertEqual(294, obj["compressedSize"])
        self.assertEqual(294, obj["compressed_size"])
        self.assertEqual(294, obj.compressed_size)
        self.assertIs(False, obj["encrypted"])

    def test_keys_keep_listing_order(self):
        self.assertEqual(
            ["name", "size", "timestamp", "compressedSize", "encrypted"],
            list(_sample()),
        )
        obj = FileObject(name="a.txt", size=1, timestamp=0, compressed_size=1)
        self.assertEqual(["name", "size", "timestamp", "compressedSize"], obj.keys())

    def test_unknown_keys_read_as_none(self):
        obj = _sample()
        self.assertIsNone(obj["crc"])
        self.assertEqual("n/a", obj.get("crc", "n/a"))
        self.assertNotIn("crc", obj)

    def test_set_and_delete(self):
        obj = _sample()
        obj["size"] = 1
        self.assertEqual(1, obj.size)
        obj.timestamp = 5
        self.assertEqual(5, obj["timestamp"])

        del obj["encrypted"]
        self.assertNotIn("encrypted", obj)
        self.assertIsNone(obj.encrypted)

        obj["comment"] = "hello"
        self.assertIn("comment", obj)
        self.assertEqual("comment", obj.keys()[-1])
        del obj["comment"]
        self.assertNotIn("comment", obj)
        del obj["never-set"]

    def test_to_dict_and_equality(self):
        data = {"name": "a.txt", "size": 3, "timestamp": 10, "compressedSize": 3}
        obj = FileObject.from_dict(data)
        self.assertEqual(data, obj.to_dict())
        self.assertEqual(obj, FileObject(name="a.txt", size=3, timestamp=10, compressed_size=3))
        self.assertNotEqual(obj, _sample())
        self.assertIn("a.txt", repr(obj))

    def test_extra_keys_from_constructor(self):
        obj = FileObject(name="a.txt", crc=123)
        self.assertEqual(123, obj["crc"])
        self.assertEqual([("name", "a.txt"), ("crc", 123)], obj.items())


if __name__ == "__main__":
    unittest.main()
