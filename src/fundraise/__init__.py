"""
Fundraise Package

Progressive margin engine for community fundraising sales.
Splits each unit margin between the group and the platform according to
volume tiers, and consolidates online and paper orders into a volume ledger.
"""

__version__ = "1.0.0"
