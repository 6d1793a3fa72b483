"""
Test suite for OCR Cluster.

This package contains all tests organized by component:
- test_algorithms/: Tests for the clustering engines and their helpers
- test_utils/: Tests for logging helpers
"""
