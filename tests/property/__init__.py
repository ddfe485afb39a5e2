"""Property-based tests for filestages.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.
"""
