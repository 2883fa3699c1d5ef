# anonymization/engine/__init__.py

"""Engine package providing the pattern registry, detector and pipeline.

This package contains the components that locate sensitive data and splice
replacements into the output text.
"""
