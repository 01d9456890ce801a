"""
Asset Kernel - HR console asset lifecycle

A ledger-backed registry of company assets with:
- Multi-employee assignment with derived asset status
- Append-only assignment history
- Request and complaint workflows
- Team-scoped visibility for managers
- Virtual machine inventory alongside physical assets
"""

__version__ = "0.1.0"
