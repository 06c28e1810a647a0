"""Target company module."""

from .profile import TargetCompany, load_target_company

__all__ = [
    "TargetCompany",
    "load_target_company",
]
