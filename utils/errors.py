from typing import Optional


class PanosVMError(Exception):
    """
    Base class for every error raised while declaring the PAN-OS VM stack.
    """


class ReadmeMissing(PanosVMError):
    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"failed to read readme '{path}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConfigMissing(PanosVMError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"missing required configuration section '{section}'")


class ConfigShape(PanosVMError, ValueError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid configuration at '{path}': {reason}")


class UnresolvedReference(PanosVMError, KeyError):
    """
    A downstream resource referenced a logical name that no upstream
    resource of the expected kind declared.
    """

    def __init__(self, kind: str, name: str, resource_name: Optional[str] = None):
        self.kind = kind
        self.name = name
        self.resource_name = resource_name
        super().__init__(kind, name)

    def __str__(self) -> str:
        message = f"unresolved {self.kind} reference '{self.name}'"
        if self.resource_name is not None:
            message = f"{self.resource_name}: {message}"
        return message


class HostRuntimeError(PanosVMError):
    def __init__(self, resource_name: str, cause: BaseException):
        self.resource_name = resource_name
        self.cause = cause
        super().__init__(f"failed to declare '{resource_name}': {cause}")
