"""
Read-only HTTP API over stored burn events.
"""
