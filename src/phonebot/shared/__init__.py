"""
Shared infrastructure: logging, exceptions and the pipeline result type.
"""
