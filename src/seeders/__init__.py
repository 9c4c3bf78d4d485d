"""Seeder modules live here.

Add modules like `organizations.py`, `users.py`, etc., and decorate seeder
functions with `@sprout.seeder(name=..., depends_on=[...])`.

Do not implement logic here unless it's shared helpers; keep seeders modular per file.
"""
