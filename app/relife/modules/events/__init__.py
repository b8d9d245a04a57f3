"""Events module (admin-only): upcoming and past party events."""
