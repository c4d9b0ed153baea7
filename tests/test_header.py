import io
import os
import sys
import struct
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from huffman_errors import CorruptHeader, ReadFault, WriteFault
from huffman_header import encode_header, read_header, write_header


def _entries(*pairs):
	return b"".join(struct.pack("<Bd", symbol, p) for symbol, p in pairs)


class BrokenSink:
	def write(self, data):
		raise OSError("no space left on device")


class BrokenSource:
	def read(self, size=-1):
		raise OSError("input/output error")


def test_encode_header_layout():
	data = encode_header([(65, 0.75), (66, 0.25)])
	assert data == b"\x02\x00" + _entries((65, 0.75), (66, 0.25))
	assert len(data) == 20


def test_header_roundtrip():
	table = [(0, 0.1), (7, 0.2), (128, 0.3), (255, 0.4)]
	sink = io.BytesIO()
	assert write_header(sink, table) == 2 + 9 * len(table)
	assert read_header(io.BytesIO(sink.getvalue())) == table


def test_empty_header():
	assert encode_header([]) == b"\x00\x00"
	assert read_header(io.BytesIO(b"\x00\x00")) == []


def test_probability_sum_out_of_tolerance():
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(b"\x01\x00" + _entries((0x41, 0.5))))


def test_tolerance_is_configurable():
	data = b"\x01\x00" + _entries((0x41, 0.95))
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(data))
	assert read_header(io.BytesIO(data), tolerance=0.1) == [(0x41, 0.95)]


def test_count_out_of_range():
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(struct.pack("<H", 257)))


def test_decreasing_byte_values():
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(b"\x02\x00" + _entries((66, 0.5), (65, 0.5))))


def test_repeated_byte_values():
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(b"\x02\x00" + _entries((65, 0.5), (65, 0.5))))


def test_non_finite_probability():
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(b"\x01\x00" + _entries((65, float("nan")))))


def test_truncated_header():
	data = encode_header([(65, 0.75), (66, 0.25)])
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(data[:-1]))
	with pytest.raises(CorruptHeader):
		read_header(io.BytesIO(data[:1]))


def test_header_leaves_payload_unread():
	source = io.BytesIO(encode_header([(65, 1.0)]) + b"\xf0\x04")
	read_header(source)
	assert source.read() == b"\xf0\x04"


def test_encode_rejects_unsorted_table():
	with pytest.raises(ValueError):
		encode_header([(66, 0.5), (65, 0.5)])


def test_write_fault():
	with pytest.raises(WriteFault):
		write_header(BrokenSink(), [(65, 1.0)])


def test_read_fault():
	with pytest.raises(ReadFault):
		read_header(BrokenSource())
