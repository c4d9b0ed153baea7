import os
import sys
import struct
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import huffman_cli
import huffman_service
from huffman_cli import EXIT_CORRUPT, EXIT_IO_ERROR, EXIT_OK, main


def test_compress_decompress_roundtrip(tmp_path, capsys):
	src = tmp_path / "notes.txt"
	packed = tmp_path / "notes.huff"
	restored = tmp_path / "notes.out"
	data = b"she sells sea shells by the sea shore\n" * 40
	src.write_bytes(data)

	assert main(["compress", str(src), str(packed)]) == EXIT_OK
	assert "compression ratio" in capsys.readouterr().out
	assert main(["--time", "decompress", str(packed), str(restored)]) == EXIT_OK
	assert "decompress took" in capsys.readouterr().out
	assert restored.read_bytes() == data


def test_info_prints_symbol_table(tmp_path, capsys):
	src = tmp_path / "ab.bin"
	packed = tmp_path / "ab.huff"
	src.write_bytes(b"AAAB")
	assert main(["compress", str(src), str(packed)]) == EXIT_OK
	capsys.readouterr()

	assert main(["info", str(packed)]) == EXIT_OK
	lines = capsys.readouterr().out.splitlines()
	assert lines[0] == "2 symbols"
	assert lines[1].split() == ["65", "A", "0.750000", "1", "1"]
	assert lines[2].split() == ["66", "B", "0.250000", "1", "0"]


def test_corrupt_input_removes_partial_output(tmp_path, capsys):
	bad = tmp_path / "bad.huff"
	out = tmp_path / "bad.out"
	bad.write_bytes(b"\x01\x00A" + struct.pack("<d", 0.5))

	assert main(["decompress", str(bad), str(out)]) == EXIT_CORRUPT
	assert "not a valid compressed file" in capsys.readouterr().err
	assert not out.exists()


def test_missing_input_is_io_error(tmp_path, capsys):
	missing = tmp_path / "nope.bin"
	assert main(["compress", str(missing), str(tmp_path / "nope.huff")]) == EXIT_IO_ERROR
	assert "I/O error" in capsys.readouterr().err


def test_tolerance_override(tmp_path):
	legacy = tmp_path / "legacy.huff"
	out = tmp_path / "legacy.out"
	# probabilities sum to 0.95: only accepted with the loose tolerance
	legacy.write_bytes(b"\x01\x00A" + struct.pack("<d", 0.95) + b"\xf0\x04")

	assert main(["decompress", str(legacy), str(out)]) == EXIT_CORRUPT
	assert main(["--tolerance", "0.1", "decompress", str(legacy), str(out)]) == EXIT_OK
	assert out.read_bytes() == b"AAAA"


def test_missing_command_is_usage_error():
	with pytest.raises(SystemExit) as exc:
		main([])
	assert exc.value.code == 2


def test_format_symbol():
	assert huffman_cli.format_symbol(65) == "A"
	assert huffman_cli.format_symbol(10) == "\\x0a"


def test_print_symbol_table_follows_redirected_stdout(capsys):
	huffman_cli.print_symbol_table([(65, 1.0, "1")])
	assert capsys.readouterr().out.splitlines()[0] == "1 symbols"


def test_input_changed_while_compressing(tmp_path, monkeypatch, capsys):
	src = tmp_path / "growing.log"
	packed = tmp_path / "growing.huff"
	src.write_bytes(b"ABAB")
	# counting pass only saw "AAAA"
	monkeypatch.setattr(huffman_service, "count_frequencies", lambda source, chunk_size: ([(65, 1.0)], 4))

	assert main(["compress", str(src), str(packed)]) == EXIT_IO_ERROR
	assert "changed while it was being compressed" in capsys.readouterr().err
	assert not packed.exists()
