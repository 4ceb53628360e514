"""
HTTP middleware for the API
"""
