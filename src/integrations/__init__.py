"""
Integrations layer.
This package contains all code used to communicate with external systems such as:
- The partner insurer's policy API (signed HTTP requests)
- The guide certification registry (Google Sheets)

Key rule:
- Route handlers and the intake pipeline MUST NOT build HTTP requests directly.
- They call the integration clients, which are injected in ONE place (src/api/main.py).
"""

from .insurance.client import InsuranceApiError, InsuranceConfigurationError, YasInsuranceClient
from .sheets.guide_registry import GuideRegistryClient, GuideRegistryConfigurationError

__all__ = [
    "InsuranceApiError", "InsuranceConfigurationError", "YasInsuranceClient",
    "GuideRegistryClient", "GuideRegistryConfigurationError",
]
