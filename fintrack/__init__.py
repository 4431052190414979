"""
fintrack - Source Package

A small personal-finance tracker: users sign up, record income and
expenses, and see their balance, monthly spend and savings, and where
the money went.

DESIGN PRINCIPLES:
1. Validate at the boundary, store exact amounts
2. Fail early, fail visibly
3. No silent corrections, no invented data
4. Every account and transaction action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "fintrack Team"
