"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model, roles and IsPlatformAdmin
- test_views.py: JWT token endpoints

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_models.py
"""
