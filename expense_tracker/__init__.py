"""
Expense Tracker - Source Package

A single-user, local-first personal expense tracker. The core is the
expense ledger and budget-evaluation engine; everything around it
(accounts, storage, the Streamlit UI) is a thin, swappable layer.

DESIGN PRINCIPLES:
1. The ledger is the single source of truth for a user's expenses
2. Derived views (filters, stats, budget status) are pure functions
3. Every mutation is persisted before control returns
4. A storage failure never corrupts what is in memory
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
