"""
Directory (Microsoft Graph) lookups.
"""
