"""
Motions module (admin-only).

- Motions are proposed by a personnel member at a meeting
- Voting status: Passed, Failed or Pending
"""
