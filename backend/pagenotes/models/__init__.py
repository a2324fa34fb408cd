"""
PageNotes Backend — ORM Models
===============================

    - user.py:  User (credentials)       → `users` table
    - note.py:  Note (per-page content)  → `notes` table
"""
