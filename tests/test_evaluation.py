import importlib.util
import json
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from huffman_service import HuffmanService


def _load_evaluation():
	path = os.path.join(REPO_ROOT, 'evaluation', 'evaluation.py')
	spec = importlib.util.spec_from_file_location('huffman_evaluation', path)
	module = importlib.util.module_from_spec(spec)
	spec.loader.exec_module(module)
	return module


def test_corpus_is_reproducible():
	ev = _load_evaluation()
	first = ev.build_corpus(1024, seed=5)
	second = ev.build_corpus(1024, seed=5)
	assert first == second
	assert first["empty"] == b""
	assert set(first["repeated_byte"]) == {ord("A")}


def test_evaluate_sample_record():
	ev = _load_evaluation()
	record = ev.evaluate_sample(HuffmanService(), "two_symbols", b"AAAB" * 64)
	assert record["outcome"] == "passed"
	assert record["lossless"] is True
	assert record["original_bytes"] == 256
	# 20-byte header, 256 one-bit codes, trailer
	assert record["compressed_bytes"] == 20 + 32 + 1


def test_main_writes_report(tmp_path):
	ev = _load_evaluation()
	report_path = tmp_path / "report.json"
	assert ev.main(["--output", str(report_path), "--size", "2048"]) == 0

	report = json.loads(report_path.read_text())
	assert report["success"] is True
	assert report["results"]["summary"]["total"] == 8
	assert report["results"]["summary"]["passed"] == 8
	assert "python_version" in report["environment"]
