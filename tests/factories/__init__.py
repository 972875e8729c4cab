"""
Test Data Factories and Builders

This module provides factories for creating test data objects,
eliminating brittle test setup and hardcoded test values.
"""
