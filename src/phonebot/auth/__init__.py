"""
Application-only authentication against the identity provider.
"""
