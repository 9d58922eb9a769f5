"""Packager driver: command building, execution and diagnostic classification."""
