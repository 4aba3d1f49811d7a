from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class LLMService(ABC):
    """Chat-completion style text generation."""

    @abstractmethod
    async def generate_response(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """Return the generated text, or None when the service produced nothing."""
        ...
