from tasksync.auth.base import CredentialProvider
from tasksync.auth.home import HomeConfigCredentialProvider

__all__ = ["CredentialProvider", "HomeConfigCredentialProvider"]
