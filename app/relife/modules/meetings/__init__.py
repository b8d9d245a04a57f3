"""
Meetings module (admin-only).

- Meetings CRUD (date, main topic, scope)
- Attendance per meeting: one row per (meeting, personnel), upserted from a checklist
- Deleting a meeting removes its attendance rows and motions (ON DELETE CASCADE)
"""
