"""
Core types shared by every service: colors, domain models and errors.
"""
