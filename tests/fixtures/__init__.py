"""Shared test fixtures package.

Provides moto-backed AWS fixtures and helpers for all test suites.
"""
