# tests/unit/__init__.py
"""
Unit tests for HARKA admin services.

Unit tests focus on testing individual functions, classes, and modules
in isolation from external dependencies like Supabase and the admin API.
"""
