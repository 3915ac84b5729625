"""
Append-only compliance audit trail.
"""
