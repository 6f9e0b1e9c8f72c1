"""
Unit Tests for chess_study

This package contains unit tests for the variation tree, record format,
puzzle mode and front ends.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_variation_tree.py

    # Run with coverage
    pytest tests/ --cov=chess_study --cov-report=html

    # Run specific test
    pytest tests/test_puzzle_session.py::TestPuzzleScenario::test_correct_move_auto_plays_reply

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
"""
