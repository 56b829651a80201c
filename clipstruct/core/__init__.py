"""Core pipeline: value objects, preprocessing, classification, statistics.

WHY: The core package is the stable heart of ClipStruct: the IR
dataclasses and the rule engine that turns caption events into a typed
structure timeline. Adapters, formatters, the CLI, and the HTTP API all
build on it.

HOW: ir.py defines the value objects, normalizer.py and segmenter.py
prepare natural segments, classifier.py assigns structure types,
stats.py aggregates, and pipeline.py chains the stages together.

RULES:
- No I/O anywhere in this package
- IR dataclasses are the contract: change with care
- Every stage returns new objects; inputs are never mutated
"""
