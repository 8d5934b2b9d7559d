"""
Budget Tracker - Source Package

A personal expense tracker with a budget dashboard and an AI advisor.

DESIGN PRINCIPLES:
1. One explicit state object, changed only through its methods
2. Analytics are pure functions, recomputed after every change
3. Persistence is best effort and never blocks the user
4. The AI only ever sees a deterministic summary, never raw records
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
