"""
phonebot: connect two Teams chat participants by phone.
"""

__version__ = "0.1.0"
