"""Base class for all trade-history export dialects."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import structlog

from proptrack.core.models import TradeRecord

logger = structlog.get_logger(__name__)


class TradeHistoryParseError(ValueError):
    """Raised when an export cannot be turned into a complete trade list."""

    PREFIX = "Failed to parse CSV file"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"{self.PREFIX}: {reason}")


class TradeHistoryDialect(ABC):
    """Abstract base class for a broker CSV export layout.

    A dialect recognizes its own files by header signature and turns the raw
    text into trade records. Parsing either returns every trade or raises.
    """

    name: str = "base"
    description: str = ""

    def __init__(self):
        self.logger = logger.bind(dialect=self.name)

    @abstractmethod
    def matches(self, raw_text: str) -> bool:
        """
        Check whether the raw text carries this dialect's header signature.

        Args:
            raw_text: Complete file contents

        Returns:
            True if this dialect should parse the file
        """
        pass

    @abstractmethod
    def parse(self, raw_text: str) -> List[TradeRecord]:
        """
        Parse the raw text into trade records in file row order.

        Raises:
            TradeHistoryParseError: If any required expectation is violated
        """
        pass

    def get_info(self) -> Dict[str, Any]:
        """Describe the dialect."""
        return {
            'name': self.name,
            'description': self.description,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
