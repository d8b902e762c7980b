"""
Unit Tests for Xiangqi Engine

This package contains unit tests for all engine components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_movegen.py

    # Run with coverage
    pytest tests/ --cov=xiangqi_engine --cov-report=html

    # Run specific test
    pytest tests/test_movegen.py::TestPerft::test_perft_depth_1

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
"""
