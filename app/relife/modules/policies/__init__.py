"""Policies module (admin-only): party policy statements."""
