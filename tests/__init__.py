"""Tests package for Search Refinery."""
