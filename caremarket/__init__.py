"""
Elderly-Care Market Analytics

Synthetic market dataset and the filtering/pivot engine behind the market
analysis dashboard.
"""

__version__ = "1.0.0"
