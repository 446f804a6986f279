"""
Spendlog - Source Package

Expense persistence and aggregation engine for a personal
expense-logging tool.

DESIGN PRINCIPLES:
1. Storage is durable and swappable
2. Every query re-reads storage (no hidden caches)
3. Aggregation is pure and deterministic
4. Failures surface to the caller, never retried silently
5. The engine is constructed explicitly, never a global
"""

__version__ = "1.0.0"
__author__ = "Spendlog Team"
