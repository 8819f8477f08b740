"""
Tripbook - Source Package

The data and logic core of a multi-trip travel planner: the trip store,
the expense aggregation and settlement engine, currency conversion and
receipt amount extraction.

DESIGN PRINCIPLES:
1. State is never mutated in place - every change produces a new snapshot
2. Invariant violations are refused quietly, never half-applied
3. Money is stored in one base currency, rounded once
4. "No result" is a value, not an exception
5. Every significant change is auditable
"""

__version__ = "1.0.0"
__author__ = "Tripbook Team"
