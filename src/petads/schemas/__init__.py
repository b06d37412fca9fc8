from .records import UserProfile, AdDetail, AdPage

__all__ = ["UserProfile", "AdDetail", "AdPage"]
