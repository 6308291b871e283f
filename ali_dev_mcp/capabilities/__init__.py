"""
Capability modules that attach tools and prompts to the server
"""
from .base import Capability
from .create_atp import CreateATPCapability
from .mcat import MCATCapability
from .pr_comments import PRCommentsCapability
from .pr_files import PRFilesCapability
from .snyk import SnykCapability

CAPABILITIES = [
    MCATCapability,
    PRFilesCapability,
    PRCommentsCapability,
    CreateATPCapability,
    SnykCapability,
]

__all__ = [
    "CAPABILITIES",
    "Capability",
    "CreateATPCapability",
    "MCATCapability",
    "PRCommentsCapability",
    "PRFilesCapability",
    "SnykCapability",
]
