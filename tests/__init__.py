"""
SummerEase - Test Suite
=======================

Structure:
    tests/
    ├── conftest.py  - Shared fixtures and in-memory fakes
    └── unit/        - Unit tests (no database, no model endpoint)

Running Tests:
    pytest
    pytest tests/unit/test_renderer.py -v
"""
