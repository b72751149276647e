import io
import pathlib
import sys
import tempfile
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from prometeo.dataio.capture_loader import (  # noqa: E402
    CapturedFrame,
    iter_capture_lines,
    load_capture,
    parse_capture_line,
    write_capture,
    write_capture_stream,
)


class CaptureLoaderTest(unittest.TestCase):
    def test_parse_relay_message(self):
        frame = parse_capture_line(
            '{"type": "raw_eeg", "packet": [199, 124, 5, 2, 0, 1], "timestamp": 1718000000123}'
        )
        self.assertEqual(frame, CapturedFrame(1718000000123, bytes([0xC7, 0x7C, 5, 2, 0, 1])))

    def test_parse_hex_record(self):
        frame = parse_capture_line('{"timestamp_ms": 42, "hex": "4f4b0d0a"}')
        self.assertEqual(frame.timestamp_ms, 42)
        self.assertEqual(frame.payload, b"OK\r\n")

    def test_skips_blank_malformed_and_foreign_lines(self):
        lines = [
            "",
            "not json",
            "[1, 2, 3]",
            '{"type": "status", "connected": true}',
            '{"type": "raw_eeg", "packet": [1, 2]}',
            '{"type": "raw_eeg", "packet": [1, 2], "timestamp": 7}',
        ]
        with self.assertLogs("prometeo.dataio.capture_loader", level="WARNING") as logs:
            frames = list(iter_capture_lines(lines))

        self.assertEqual(frames, [CapturedFrame(7, b"\x01\x02")])
        self.assertEqual(len(logs.records), 3)

    def test_write_then_load(self):
        frames = [
            CapturedFrame(0, b"START"),
            CapturedFrame(4, bytes([0xC7, 0x7C, 0, 2, 0, 1])),
        ]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "captures" / "session.jsonl"

            count = write_capture(path, frames)

            self.assertEqual(count, 2)
            self.assertEqual(load_capture(path), frames)

    def test_stream_writer_emits_relay_shape(self):
        buffer = io.StringIO()
        write_capture_stream(buffer, [CapturedFrame(9, b"\x01")])
        self.assertEqual(buffer.getvalue(), '{"type": "raw_eeg", "packet": [1], "timestamp": 9}\n')


if __name__ == "__main__":
    unittest.main()
