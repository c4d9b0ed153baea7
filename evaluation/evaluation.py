#!/usr/bin/env python3
"""
Evaluation runner for the Huffman stream compressor.

This evaluation script:
- Builds a small corpus of sample inputs (text, skewed, random, degenerate)
- Compresses and decompresses each sample, checking the round trip
- Generates a structured report with ratios, timings and environment metadata

Run with:
    python evaluation/evaluation.py [options]
"""
import sys
import json
import uuid
import random
import platform
import subprocess
import time
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_config import DEFAULT_CONFIG  # noqa: E402
from huffman_errors import HuffmanError  # noqa: E402
from huffman_service import HuffmanService  # noqa: E402


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    for key, cmd in (
        ("git_commit", ["git", "rev-parse", "HEAD"]),
        ("git_branch", ["git", "rev-parse", "--abbrev-ref", "HEAD"]),
    ):
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(PROJECT_ROOT),
                timeout=5
            )
        except (OSError, subprocess.SubprocessError):
            continue
        if result.returncode == 0:
            value = result.stdout.strip()
            git_info[key] = value[:8] if key == "git_commit" else value

    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def build_corpus(size, seed):
    """
    Build the sample inputs used by the evaluation.

    Args:
        size: Approximate size in bytes of the larger samples
        seed: Seed for the random samples, so reports are comparable

    Returns:
        dict mapping sample name to bytes
    """
    rng = random.Random(seed)
    text = b"The quick brown fox jumps over the lazy dog. "
    skewed_symbols = b"aaaaaaaabbbbccd"

    return {
        "empty": b"",
        "single_byte": b"A",
        "repeated_byte": b"A" * size,
        "two_symbols": b"AAAB" * (size // 4),
        "english_text": text * (size // len(text)),
        "skewed": bytes(rng.choice(skewed_symbols) for _ in range(size)),
        "all_bytes": bytes(range(256)) * max(1, size // 256),
        "random": bytes(rng.getrandbits(8) for _ in range(size)),
    }


def evaluate_sample(service, name, data):
    """Compress and decompress one sample, returning its result record."""
    try:
        t0 = time.time()
        compressed = service.compress(data)
        t1 = time.time()
        restored = service.decompress(compressed)
        t2 = time.time()
    except HuffmanError as e:
        print(f"  ❌ {name}: {type(e).__name__}: {e}")
        return {
            "name": name,
            "outcome": "error",
            "error": f"{type(e).__name__}: {e}",
            "original_bytes": len(data),
        }

    lossless = restored == data
    ratio = len(compressed) / len(data) if data else 0.0
    outcome = "passed" if lossless else "failed"
    status_icon = "✅" if lossless else "❌"
    print(f"  {status_icon} {name}: {len(data)} -> {len(compressed)} bytes ({ratio * 100:.2f}%)")

    return {
        "name": name,
        "outcome": outcome,
        "original_bytes": len(data),
        "compressed_bytes": len(compressed),
        "compression_ratio": round(ratio, 6),
        "compression_time": round(t1 - t0, 6),
        "decompression_time": round(t2 - t1, 6),
        "lossless": lossless,
    }


def run_evaluation(size, seed, chunk_size=None):
    """
    Run the round-trip evaluation over the whole corpus.

    Returns dict with per-sample results and a summary.
    """
    print(f"\n{'=' * 60}")
    print("HUFFMAN STREAM EVALUATION")
    print(f"{'=' * 60}")

    config = DEFAULT_CONFIG.with_overrides(read_chunk_size=chunk_size)
    service = HuffmanService(config)
    samples = [evaluate_sample(service, name, data) for name, data in build_corpus(size, seed).items()]

    passed = sum(1 for s in samples if s["outcome"] == "passed")
    failed = sum(1 for s in samples if s["outcome"] == "failed")
    errors = sum(1 for s in samples if s["outcome"] == "error")
    summary = {
        "total": len(samples),
        "passed": passed,
        "failed": failed,
        "errors": errors,
    }

    print(f"\nResults: {passed} passed, {failed} failed, {errors} errors (total: {len(samples)})")

    return {
        "success": failed == 0 and errors == 0,
        "config": {
            "read_chunk_size": config.read_chunk_size,
            "flush_bytes": config.flush_bytes,
            "tolerance": config.tolerance,
        },
        "samples": samples,
        "summary": summary,
    }


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    date_str = now.strftime("%Y-%m-%d")
    time_str = now.strftime("%H-%M-%S")

    output_dir = PROJECT_ROOT / "evaluation" / date_str / time_str
    output_dir.mkdir(parents=True, exist_ok=True)

    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run Huffman stream round-trip evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument("--size", type=int, default=64 * 1024, help="Approximate size of the larger samples")
    parser.add_argument("--seed", type=int, default=1234, help="Seed for the random samples")
    parser.add_argument("--chunk-size", type=int, default=None, help="Override the read chunk size")

    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    results = run_evaluation(args.size, args.seed, args.chunk_size)
    success = results["success"]

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "error": None if success else "Some samples did not round-trip",
        "environment": get_environment_info(),
        "results": results,
    }

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = generate_output_path()

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
