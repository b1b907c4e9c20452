"""
Market path generation for GLWB simulation.

See: Glasserman (2003) "Monte Carlo Methods in Financial Engineering"
"""

from .gbm import (
    GBMParams,
    GBMReturnGenerator,
    MarketPathGenerator,
    generate_gbm_returns,
    generate_return_matrix,
)

__all__ = [
    "GBMParams",
    "GBMReturnGenerator",
    "MarketPathGenerator",
    "generate_gbm_returns",
    "generate_return_matrix",
]
