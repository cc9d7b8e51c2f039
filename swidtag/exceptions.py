"""
Custom exceptions for the swidtag package.
"""


class SwidTagError(Exception):
    """Base exception class for all swidtag errors."""
    pass


class InvalidMetadataMutation(SwidTagError):
    """Raised when a recorded Meta value would be overwritten with a different one."""
    
    def __init__(self, key: str, existing_values=None, value: str = None):
        self.key = key
        self.existing_values = list(existing_values or [])
        self.value = value
        
        message = f"Meta attribute '{key}' is already set"
        if self.existing_values:
            recorded = ", ".join(f"'{v}'" for v in self.existing_values)
            message += f" to {recorded}; refusing to change it to '{value}'"
        
        super().__init__(message)


class TagParseError(SwidTagError):
    """Raised when software identity tag text cannot be parsed."""
    
    def __init__(self, message: str, file_path: str = None):
        self.file_path = file_path
        
        if file_path:
            message = f"Error parsing tag file '{file_path}': {message}"
        
        super().__init__(message)


class ConfigurationError(SwidTagError):
    """Raised when configuration is invalid."""
    pass


class InvalidAttributeError(SwidTagError):
    """Raised when an attribute name or value cannot be represented in an XML tag."""
    
    def __init__(self, message: str, name: str = None, value: str = None):
        self.name = name
        self.value = value
        
        if name is not None:
            message = f"Cannot write attribute '{name}': {message}"
        
        super().__init__(message)
