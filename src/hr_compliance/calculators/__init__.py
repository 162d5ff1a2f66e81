"""Compliance and compensation calculators."""

from hr_compliance.calculators.engine import PayrollBatchAggregator, PayrollBatchResult
from hr_compliance.calculators.eos_calculator import EndOfServiceCalculator, TerminationReason
from hr_compliance.calculators.gosi_calculator import GOSICalculator
from hr_compliance.calculators.item_builder import PayrollItemBuilder
from hr_compliance.calculators.nitaqat_classifier import NitaqatClassifier

__all__ = [
    "PayrollBatchAggregator",
    "PayrollBatchResult",
    "EndOfServiceCalculator",
    "TerminationReason",
    "GOSICalculator",
    "PayrollItemBuilder",
    "NitaqatClassifier",
]
