from .validate_directory import ValidateDirectory
from .persist_directory import PersistDirectory

__all__ = ["ValidateDirectory", "PersistDirectory"]
