"""
Committees module (admin-only).

- Committees CRUD; names are unique
- Personnel may belong to one committee (personnel.committee_id, SET NULL on delete)
"""
