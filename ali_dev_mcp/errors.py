"""
Error types raised by the Azure DevOps facade, the step parser and the registrar
"""
from typing import Optional


class AliDevMCPError(Exception):
    """Base class for all server errors"""


class RemoteError(AliDevMCPError):
    """Azure DevOps call failed (non-success response, bad payload, transport error)"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class AuthError(RemoteError):
    """Access token could not be acquired"""


class NotFoundError(RemoteError):
    """Requested remote resource does not exist"""


class ValidationError(AliDevMCPError):
    """Arguments rejected before a handler runs"""


class ParseError(AliDevMCPError):
    """Markup could not be parsed at all"""


class RegistrationError(AliDevMCPError):
    """Tool or prompt registration is misconfigured (duplicate name, double register)"""
