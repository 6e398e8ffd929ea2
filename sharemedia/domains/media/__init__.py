"""
Media Domain

- artifacts.py - Overwriting writes into shared storage
- thumbnails.py - Video frame and duration extraction
"""
