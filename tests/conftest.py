"""Shared fixtures for the scanner tests."""

from pathlib import Path

import pytest

from scanners import JavaScanner, ScalaScanner

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "test_samples" / "shop"


@pytest.fixture
def samples_dir() -> Path:
    return SAMPLES_DIR


@pytest.fixture
def java_scanner() -> JavaScanner:
    return JavaScanner()


@pytest.fixture
def scala_scanner() -> ScalaScanner:
    return ScalaScanner()
