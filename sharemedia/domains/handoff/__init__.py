"""
Hand-off Domain

- store.py - Envelope persistence in the shared preferences domain
- notifier.py - Best-effort host wake-up
"""
