"""
Mirathi - Property-Based Testing Suite

Property-based testing using Hypothesis to discover edge cases in
coordinate bounds, name and phone normalization, and identity formats.
"""
