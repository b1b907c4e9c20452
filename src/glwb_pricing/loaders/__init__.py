"""
Data loaders.

Mortality tables (SOA 2012 IAM, tabulated Gompertz-Makeham, improvement).
"""

from .mortality import (
    MortalityLoader,
    MortalityTable,
    SOA_2012_IAM_FEMALE_QX,
    SOA_2012_IAM_MALE_QX,
)

__all__ = [
    "MortalityTable",
    "MortalityLoader",
    "SOA_2012_IAM_MALE_QX",
    "SOA_2012_IAM_FEMALE_QX",
]
