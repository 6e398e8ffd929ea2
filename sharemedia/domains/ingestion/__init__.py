"""
Ingestion Domain

Turns the attachments handed to the extension into MediaRecords:
- attachments.py - Inbound attachment descriptors
- classifier.py - Content kind probing
- records.py - Per-attachment materialization
- pipeline.py - Concurrent fan-out and exactly-once hand-off
"""
