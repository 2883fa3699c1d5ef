"""Shared fixtures for the anonymization test suite."""

import logging
import random

import pytest

from anonymization.engine.anonymizer import AnonymizationPipeline
from anonymization.engine.detector import Detector
from anonymization.engine.registry import PatternRegistry
from anonymization.logic.strategies import StrategyResolver
from anonymization.service.pipeline import AnonymizationService


@pytest.fixture
def registry():
    """A fresh registry holding the built-in catalogue."""
    return PatternRegistry.with_builtins()


@pytest.fixture
def detector(registry):
    return Detector(registry)


@pytest.fixture
def pipeline(registry):
    """A pipeline with a seeded random source."""
    return AnonymizationPipeline(registry, resolver=StrategyResolver(rng=random.Random(42)))


@pytest.fixture
def fresh_service():
    """Rebuilds the process-wide service around each test."""
    AnonymizationService.reset()
    yield
    AnonymizationService.reset()


@pytest.fixture
def restore_logging():
    """Puts the root logger back after code that reconfigures it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
