"""
Core building blocks shared by every Bizhub app: base model, exception
taxonomy, structured logging, request-id middleware and DRF permissions.
"""
