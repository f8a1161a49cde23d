from orgsuite.config.settings import OrgSuiteConfig, get_settings

__all__ = ["OrgSuiteConfig", "get_settings"]
