from .repos import AccountsRepoPort, AttributeStorePort, ContentRepoPort

__all__ = [
    "AccountsRepoPort",
    "AttributeStorePort",
    "ContentRepoPort",
]
