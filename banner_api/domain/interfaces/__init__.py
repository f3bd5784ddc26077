"""Domain interfaces (Protocols)"""

from banner_api.domain.interfaces.site_adapter import SiteAdapter

__all__ = ["SiteAdapter"]
