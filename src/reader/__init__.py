"""Sampling read path.

This package discovers dataset layout, resolves and merges file groups,
and samples merged records for workload generation.
"""
