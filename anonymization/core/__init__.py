# anonymization/core/__init__.py

"""Core domain models and utilities used across the anonymization engine.

This package provides constants, domain types, exceptions, and the pattern
catalogue loader shared by the rest of the application.
"""
