"""
Shop Pricing Package

Pricing engine for a print/textile-finishing shop.
Resolves unit prices using Service → Tier → Client Price pipeline and
computes order totals with IVA.
"""

__version__ = "1.0.0"
