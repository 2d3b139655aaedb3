"""
Tests for api_keys app.

This package contains test modules for:
- test_models.py: Expiry window, quota and soft delete
- test_services.py: Quota guard, usage accounting, admin CRUD, monthly reset
- test_tasks.py: Monthly usage reset task
- test_views.py: Admin CRUD and usage statistics endpoints

Usage:
    pytest api_keys/tests/
    pytest api_keys/tests/test_services.py
"""
