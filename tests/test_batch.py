import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, call

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from helpers import SMALL_SFX, SMALL_VO, make_codec, small_registry, write_bytes
from streamwave.core.batch import decode_all, encode_all, resolve_operations, run_batch
from streamwave.core.models import (
    AudioFormat, CodecError, ErrorKind, OperationStatus, TransformResult,
)


class TestResolveOperations(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_directory_walk_is_recursive_and_stable(self):
        tree = self.root / "tree"
        write_bytes(tree / "b.wav", b"1")
        write_bytes(tree / "a" / "c.wav", b"2")
        write_bytes(tree / "a" / "deep" / "d.wav", b"3")
        (tree / "empty").mkdir()

        first = [op.path for op in resolve_operations(tree)]
        second = [op.path for op in resolve_operations(tree)]

        self.assertEqual(first, second)
        self.assertEqual(sorted(first), sorted([
            tree / "b.wav", tree / "a" / "c.wav", tree / "a" / "deep" / "d.wav",
        ]))
        for op in resolve_operations(tree):
            self.assertEqual(op.status, OperationStatus.PENDING)
            self.assertIsNone(op.error)

    def test_file_list_keeps_line_order(self):
        listing = self.root / "files.txt"
        listing.write_bytes(b"z.wav\r\n\r\nsub/a.wav\n\n  \nm.wav")

        paths = [op.path for op in resolve_operations(listing)]
        self.assertEqual(paths, [Path("z.wav"), Path("sub/a.wav"), Path("m.wav")])

    def test_missing_input_is_open_error(self):
        with self.assertRaises(CodecError) as ctx:
            resolve_operations(self.root / "missing.txt")
        self.assertEqual(ctx.exception.kind, ErrorKind.OPEN)


class TestRunBatch(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.codec = make_codec(self.root / "tmp", small_registry())

    def tearDown(self):
        self.tmp.cleanup()

    def test_encode_tree_mirrors_structure(self):
        tree = self.root / "root"
        write_bytes(tree / "a" / "b.dat", b"\x01\x02")
        write_bytes(tree / "top.dat", b"\x03")

        operations = encode_all(tree, AudioFormat.SFX, self.root / "out", codec=self.codec)

        self.assertTrue(all(op.succeeded for op in operations))
        self.assertEqual((self.root / "out" / "a" / "b.wav").read_bytes(), SMALL_SFX + b"\x01\x02")
        self.assertEqual((self.root / "out" / "top.wav").read_bytes(), SMALL_SFX + b"\x03")
        # Inputs untouched
        self.assertEqual((tree / "a" / "b.dat").read_bytes(), b"\x01\x02")

    def test_failure_does_not_abort_batch(self):
        good_a = write_bytes(self.root / "in" / "a.wav", SMALL_VO + b"A")
        good_c = write_bytes(self.root / "in" / "c.wav", SMALL_VO + b"C")
        listing = self.root / "list.txt"
        listing.write_text(f"{good_a}\n{self.root / 'in' / 'missing.wav'}\n{good_c}\n")

        operations = decode_all(listing, self.root / "out", codec=self.codec)

        self.assertEqual(len(operations), 3)
        self.assertEqual([op.failed for op in operations], [False, True, False])
        self.assertEqual(operations[1].error_kind, ErrorKind.OPEN)
        self.assertIn("missing.wav", operations[1].error)
        # Unrelated list entries are flattened into the output root
        self.assertEqual((self.root / "out" / "a.mp3").read_bytes(), b"A")
        self.assertEqual((self.root / "out" / "c.mp3").read_bytes(), b"C")
        self.assertEqual(operations[0].output, self.root / "out" / "a.mp3")

    def test_raising_transform_is_captured(self):
        tree = self.root / "tree"
        for name in ("1.wav", "2.wav", "3.wav"):
            write_bytes(tree / name, b"x")

        def transform(src, dst):
            if src.name == "2.wav":
                raise RuntimeError("boom")
            return TransformResult(source=src, output=dst)

        operations = run_batch(tree, transform, self.root / "out")

        self.assertEqual([op.path.name for op in operations], ["1.wav", "2.wav", "3.wav"])
        self.assertEqual([op.status for op in operations], [
            OperationStatus.SUCCEEDED, OperationStatus.FAILED, OperationStatus.SUCCEEDED,
        ])
        self.assertEqual(operations[1].error, "boom")

    def test_transform_receives_mirrored_paths(self):
        tree = self.root / "tree"
        write_bytes(tree / "x" / "y.wav", b"x")
        transform = MagicMock(side_effect=lambda src, dst: TransformResult(source=src))

        run_batch(tree, transform, self.root / "out")

        transform.assert_called_once_with(tree / "x" / "y.wav", self.root / "out" / "x" / "y.wav")

    def test_output_root_is_created(self):
        tree = self.root / "tree"
        write_bytes(tree / "a.wav", SMALL_SFX + b"!")

        decode_all(tree, self.root / "new" / "nested", codec=self.codec)
        self.assertEqual((self.root / "new" / "nested" / "a.wav").read_bytes(), b"!")

    def test_in_place_batch(self):
        tree = self.root / "tree"
        write_bytes(tree / "s" / "fx.wav", SMALL_SFX + b"pcm")
        write_bytes(tree / "plain.ogg", b"OggS")

        operations = decode_all(tree, codec=self.codec)

        self.assertTrue(all(op.succeeded for op in operations))
        self.assertEqual((tree / "s" / "fx.wav").read_bytes(), b"pcm")
        self.assertEqual((tree / "plain.ogg").read_bytes(), b"OggS")

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlinked_file_is_mirrored_under_its_directory(self):
        target = write_bytes(self.root / "elsewhere" / "real.wav", SMALL_SFX + b"pcm")
        tree = self.root / "tree"
        (tree / "a").mkdir(parents=True)
        os.symlink(target, tree / "a" / "link.wav")

        operations = decode_all(tree, self.root / "out", codec=self.codec)

        self.assertTrue(all(op.succeeded for op in operations))
        self.assertEqual((self.root / "out" / "a" / "link.wav").read_bytes(), b"pcm")
        self.assertFalse((self.root / "out" / "link.wav").exists())

    def test_progress_called_once_per_file(self):
        tree = self.root / "tree"
        write_bytes(tree / "a.wav", SMALL_SFX + b"1")
        write_bytes(tree / "b.wav", SMALL_SFX + b"2")
        progress = MagicMock()

        operations = decode_all(tree, self.root / "out", codec=self.codec, progress=progress)

        self.assertEqual(progress.call_args_list, [
            call(operations[0], 1, 2),
            call(operations[1], 2, 2),
        ])

    def test_missing_input_raises(self):
        with self.assertRaises(CodecError) as ctx:
            decode_all(self.root / "nowhere", self.root / "out", codec=self.codec)
        self.assertEqual(ctx.exception.kind, ErrorKind.OPEN)
        self.assertFalse((self.root / "out").exists())

    def test_file_output_root_raises(self):
        listing = self.root / "list.txt"
        listing.write_text("a.wav\n")

        # Without an output root the list file itself would be the root
        with self.assertRaises(CodecError) as ctx:
            decode_all(listing, codec=self.codec)
        self.assertEqual(ctx.exception.kind, ErrorKind.OPEN)

    def test_encode_all_rejects_none(self):
        with self.assertRaises(CodecError) as ctx:
            encode_all(self.root, AudioFormat.NONE, codec=self.codec)
        self.assertEqual(ctx.exception.kind, ErrorKind.FORMAT)


if __name__ == '__main__':
    unittest.main()
