"""News module (admin-only): published party announcements."""
