"""
Committee Manager - Source Package

State engine for rotating-savings groups ("committees") and an
installment-sale ledger, designed for a small shop that runs
committees for its customers.

DESIGN PRINCIPLES:
1. The store confirms → then local state changes
2. Payout history is never silently erased
3. Derived values (status, alerts) are recomputed, never stored by hand
4. Every mutation is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Committee Manager Team"
