"""Utility modules: configuration, constants, validation and helpers."""
