from abc import ABC, abstractmethod
from typing import FrozenSet, Optional

from ..schema import EngineResult, HintStep


class ITxtEngine(ABC):
    """Interface for recognition engines that turn an image file into raw text."""

    @abstractmethod
    def run(self, image_path: str, step: HintStep) -> EngineResult:
        """Recognize `image_path` with the step's layout mode and languages. Must not raise."""
        ...

    def available_languages(self) -> Optional[FrozenSet[str]]:
        """Installed language packs, or None when unknown (no filtering is applied)."""
        return None

    def is_available(self) -> bool:
        return True
