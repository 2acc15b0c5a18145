"""
Test suite for the textspots project.
"""
