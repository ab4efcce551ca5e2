"""
Domain packages for HARKA admin services.

- search: in-memory admin search index
- backup: backup, export, import and restore
"""
