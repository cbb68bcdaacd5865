# Obscura Test Configuration
# This file contains test settings and fixtures

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from obscura_core.crypto import CryptoConfig, CryptoPacker
from obscura_core.stego import PixelBuffer

# Key derivation at 100k iterations dominates test time; most tests
# exercise packet handling, not PBKDF2 strength.
FAST_CONFIG = CryptoConfig(iterations=1000)


@pytest.fixture
def packer():
    """Packer with production parameters."""
    return CryptoPacker()


@pytest.fixture
def fast_packer():
    """Packer with a low PBKDF2 iteration count."""
    return CryptoPacker(FAST_CONFIG)


@pytest.fixture
def cover():
    """Opaque 100x100 cover with varied channel values."""
    rng = np.random.default_rng(1234)
    data = rng.integers(0, 256, size=100 * 100 * 4, dtype=np.uint8)
    data.reshape(-1, 4)[:, 3] = 255
    return PixelBuffer(data, 100, 100)


@pytest.fixture
def cover_png(tmp_path, cover):
    """The cover fixture written as a PNG file."""
    path = tmp_path / "cover.png"
    cover.save(path)
    return path


@pytest.fixture
def sample_data(tmp_path):
    """Provide sample data for file encryption tests."""
    data_file = tmp_path / "sample.txt"
    data_file.write_text("Hello, World! This is test data for Obscura encryption.")
    return data_file
