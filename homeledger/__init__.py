"""
HomeLedger - Source Package

A small household expense tracker for one device and a handful of
family members.

DESIGN PRINCIPLES:
1. Everything lives in a local key-value store, one JSON value per slot
2. A broken or missing collection reads as "no data", never a crash
3. Login failures look identical from the outside
4. First-run setup repairs itself after a crash
5. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "HomeLedger Team"
