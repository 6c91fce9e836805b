"""
Core infrastructure helpers (external clients).
"""
