"""Unit tests for the hoop pattern matcher application wiring.

Covers configuration, dependency injection and logging helpers.
"""
