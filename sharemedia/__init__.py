"""
sharemedia

Share-extension ingestion and host hand-off:
- Classify and materialize shared attachments into shared storage
- Commit the record list and message to a shared preferences domain
- Wake the host application with a best-effort URI notification
"""

__version__ = "1.0.0"
