"""
Personnel module (admin-only).

- Party members with party / student council positions, campus, faculty and year
- Optional committee membership
- A person who proposed a motion cannot be deleted (motions.proposer_id RESTRICT)
"""
