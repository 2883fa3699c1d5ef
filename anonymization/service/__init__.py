# anonymization/service/__init__.py

"""Settings and the process-wide service facade."""
