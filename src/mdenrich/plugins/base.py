"""Plugin capability interfaces: metadata enhancers and quality validators"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mdenrich.core.models import DocumentMetadata, ProcessingContext, QualityReport


@dataclass(frozen=True)
class PluginInfo:
    """Plugin identity is (name, version)."""
    name: str
    version: str
    description: str = ""
    author: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"


class Plugin:
    """Common plugin attributes; concrete plugins also implement one or both capabilities."""
    info: PluginInfo
    priority: int = 0       # higher runs first


class MetadataEnhancer(Plugin, ABC):
    @abstractmethod
    def enhance(self, metadata: DocumentMetadata, context: ProcessingContext) -> DocumentMetadata:
        """Return derived metadata. Raising is allowed; the pipeline isolates the failure."""
        raise NotImplementedError


class QualityValidator(Plugin, ABC):
    @abstractmethod
    def validate(self, content: str, metadata: DocumentMetadata, context: ProcessingContext) -> QualityReport:
        """Score content without mutating metadata."""
        raise NotImplementedError
