from pathlib import Path
from typing import Optional


class TextifyError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(TextifyError):
    # errors related to configuration.
    pass

class DiscoveryError(TextifyError):
    # errors during rule discovery.
    pass

class WalkError(TextifyError):
    # a directory listing failed mid-walk; the whole walk is aborted.
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path

class OutputError(TextifyError):
    # errors during output operations.
    pass

class TokenizerError(TextifyError):
    # errors from the tokenizer.
    pass
