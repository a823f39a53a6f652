"""Bookkeeping desktop app: sales, debts, expenses and PDF reports."""

__version__ = "0.1.0"
