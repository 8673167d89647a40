# tests/__init__.py
"""
pyupb Test Package

Shared fixtures and the in-memory transport live in conftest.py.

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""
