# src/sample_means/__init__.py
"""
Primitives shared by every sample-mean strategy: a seeded random source,
an approximate-equality checker, and the error types the harness raises.
"""
