# tw_nhi_icc/core/models.py

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Sex(str, Enum):
    """Sex printed on the NHI card."""
    M = "M"
    F = "F"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class VersionInfo:
    """Version reported by the TW NHI IC Card Service. Passed through as-is."""
    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    pre: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "VersionInfo":
        return cls(
            major=data.get("major"),
            minor=data.get("minor"),
            patch=data.get("patch"),
            pre=data.get("pre"),
            text=data.get("text"),
        )


@dataclass(frozen=True)
class CardRecord:
    """One NHI card currently inserted in a reader."""
    reader_name: str
    card_no: str
    full_name: str
    id_no: str
    birthday: datetime.datetime
    sex: Sex
    issue_date: datetime.datetime

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "CardRecord":
        """
        Builds a record from the service's JSON object.

        Raises:
            KeyError: A field is missing.
            ValueError: ``sex`` is not M/F.
            OverflowError: A timestamp is out of the datetime range.
            TypeError: A timestamp is not a number.
        """
        return cls(
            reader_name=data["reader_name"],
            card_no=data["card_no"],
            full_name=data["full_name"],
            id_no=data["id_no"],
            birthday=from_epoch_millis(data["birth_date_timestamp"]),
            sex=Sex(data["sex"]),
            issue_date=from_epoch_millis(data["issue_date_timestamp"]),
        )


_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def from_epoch_millis(timestamp: float) -> datetime.datetime:
    """Converts epoch milliseconds (negative before 1970) to an aware UTC datetime."""
    return _EPOCH + datetime.timedelta(milliseconds=timestamp)


def map_card_list(cards: List[Dict[str, Any]]) -> List[CardRecord]:
    """Reshapes the wire card list into CardRecord objects, keeping the order."""
    if not isinstance(cards, list):
        raise TypeError(f"Expected a list of cards, got {type(cards).__name__}")
    records = [CardRecord.from_wire(card) for card in cards]
    logger.debug(f"Mapped {len(records)} card(s)")
    return records
