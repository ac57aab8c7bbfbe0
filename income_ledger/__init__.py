"""
Income Ledger - Source Package

A personal ledger for foreign-currency income. Each transaction is
converted to UAH at the official National Bank rate for its date,
and totals are grouped by calendar quarter for tax reporting.

DESIGN PRINCIPLES:
1. Validate input before touching the network
2. Fail early, fail visibly
3. A transaction exists only with a confirmed rate
4. Every step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Income Ledger Team"
