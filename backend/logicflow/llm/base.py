from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class ChatClient(ABC):
    @abstractmethod
    def chat(self, messages: List[Dict], temperature: Optional[float] = None) -> str:
        """Return assistant text for the given chat messages"""
        pass
