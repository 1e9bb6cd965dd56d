"""
HTTP layer shared by the identity and team services.
"""
