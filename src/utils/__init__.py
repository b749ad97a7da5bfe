from .config_loader import InsuranceConfig, UnknownBranchError, load_insurance_config

__all__ = ["InsuranceConfig", "UnknownBranchError", "load_insurance_config"]
