# filename: huffman_config.py

from dataclasses import dataclass, replace

# Bytes pulled from the input per read call
READ_CHUNK_SIZE = 64 * 1024
# Bytes the bit accumulator holds before it is flushed to the sink
FLUSH_BYTES = 4096
# Allowed deviation of the header probability sum from 1.0
PROBABILITY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class CodecConfig:
    read_chunk_size: int = READ_CHUNK_SIZE
    flush_bytes: int = FLUSH_BYTES
    tolerance: float = PROBABILITY_TOLERANCE

    def __post_init__(self):
        if self.read_chunk_size <= 0:
            raise ValueError(f"read_chunk_size must be positive, got {self.read_chunk_size}")
        if self.flush_bytes <= 0:
            raise ValueError(f"flush_bytes must be positive, got {self.flush_bytes}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must not be negative, got {self.tolerance}")

    @property
    def flush_bits(self):
        return self.flush_bytes * 8

    def with_overrides(self, **overrides):
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


DEFAULT_CONFIG = CodecConfig()
