# anonymization/logic/__init__.py

"""Replacement strategies, synthetic value generators and risk scoring."""
