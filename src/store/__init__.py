"""Storage collaborators.

This package lists and opens dataset files, reads the commit timeline,
decodes base files and delta blocks, and parses record schemas.
"""
