"""
records.py - Data model for the change history read from the host application.

Defines the immutable rows consumed by the statistics engine (changes, users,
audit log entries, messages) and ChangeDataset, the request-scoped working
set handed to the statistics collectors.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import InvalidRecordStreamError
from .labels import sanitize_text

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS = ('%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M', '%Y-%m-%d')

CHANGE_STATUSES = ('accepted', 'rejected', 'pending')

RecordKey = Tuple[int, str]  # (gedcom_id, xref)
NameResolver = Callable[[Iterable[RecordKey]], Dict[RecordKey, str]]


def naive_local(moment: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp as stored by the host application.

    Args:
        value: datetime, date or 'YYYY-MM-DD HH:MM:SS' style string.

    Returns:
        datetime: Naive datetime with second precision.

    Raises:
        InvalidRecordStreamError: If the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return naive_local(value).replace(microsecond=0)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        for fmt in TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    raise InvalidRecordStreamError(f"Unparseable timestamp: {value!r}")


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRecordStreamError(f"Expected an integer id, got {value!r}")


def _required(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None or value == '':
        raise InvalidRecordStreamError(f"Row is missing required field '{key}'")
    return value


@dataclass(frozen=True)
class ChangeRecord:
    """
    One row of edit history.

    An empty old_gedcom marks a creation, an empty new_gedcom a deletion.

    Attributes:
        xref (str): Record identifier.
        gedcom_id (int): Owning tree.
        user_id (Optional[int]): Actor, None for anonymous/system changes.
        change_time (datetime): When the change was saved.
        status (str): 'accepted', 'rejected' or 'pending'.
        old_gedcom (str): Record text before the change.
        new_gedcom (str): Record text after the change.
    """
    xref: str
    gedcom_id: int
    user_id: Optional[int]
    change_time: datetime
    status: str = 'accepted'
    old_gedcom: str = ''
    new_gedcom: str = ''

    def __post_init__(self) -> None:
        object.__setattr__(self, 'change_time', naive_local(self.change_time))

    @property
    def is_creation(self) -> bool:
        return self.old_gedcom == ''

    @property
    def is_deletion(self) -> bool:
        return self.new_gedcom == ''

    @property
    def is_modification(self) -> bool:
        return self.old_gedcom != '' and self.new_gedcom != ''

    @property
    def is_accepted(self) -> bool:
        return self.status == 'accepted'

    @property
    def record_key(self) -> RecordKey:
        return (self.gedcom_id, self.xref)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ChangeRecord:
        """
        Build a ChangeRecord from a store row.

        Args:
            row: Mapping with the columns of the host 'change' table.

        Returns:
            ChangeRecord: The parsed record.

        Raises:
            InvalidRecordStreamError: If xref or change_time is missing or invalid.
        """
        gedcom_id = _optional_int(row.get('gedcom_id', row.get('tree')))
        return cls(
            xref=sanitize_text(_required(row, 'xref')),
            gedcom_id=gedcom_id if gedcom_id is not None else 0,
            user_id=_optional_int(row.get('user_id')),
            change_time=parse_timestamp(_required(row, 'change_time')),
            status=sanitize_text(row.get('status') or 'accepted').lower(),
            old_gedcom=sanitize_text(row.get('old_gedcom')),
            new_gedcom=sanitize_text(row.get('new_gedcom')),
        )


@dataclass(frozen=True)
class UserInfo:
    """Entry of the actor directory."""
    user_id: int
    user_name: str = ''
    real_name: str = ''
    email: str = ''

    @property
    def display_name(self) -> str:
        """Real name, falling back to the login name."""
        return self.real_name or self.user_name or '<unknown>'

    @property
    def login_name(self) -> str:
        return self.user_name or 'Unknown'

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> UserInfo:
        return cls(
            user_id=int(_required(row, 'user_id')),
            user_name=sanitize_text(row.get('user_name')),
            real_name=sanitize_text(row.get('real_name')),
            email=sanitize_text(row.get('email')),
        )


@dataclass(frozen=True)
class LogEntry:
    """Row of the security/audit log."""
    log_type: str
    log_time: datetime
    log_message: str = ''
    user_id: Optional[int] = None
    ip_address: str = ''

    def __post_init__(self) -> None:
        object.__setattr__(self, 'log_time', naive_local(self.log_time))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LogEntry:
        return cls(
            log_type=sanitize_text(_required(row, 'log_type')),
            log_time=parse_timestamp(_required(row, 'log_time')),
            log_message=sanitize_text(row.get('log_message')),
            user_id=_optional_int(row.get('user_id')),
            ip_address=sanitize_text(row.get('ip_address')),
        )


@dataclass(frozen=True)
class Message:
    """Row of the internal messaging table; user_id is the recipient."""
    created: datetime
    user_id: Optional[int] = None
    sender: str = ''

    def __post_init__(self) -> None:
        object.__setattr__(self, 'created', naive_local(self.created))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Message:
        return cls(
            created=parse_timestamp(_required(row, 'created')),
            user_id=_optional_int(row.get('user_id')),
            sender=sanitize_text(row.get('sender')),
        )


@dataclass
class ChangeDataset:
    """
    Request-scoped working set for one statistics computation.

    Attributes:
        changes: Change rows matching the time/actor/tree filter (all statuses).
        users: Actor directory keyed by user_id.
        trees: Tree names keyed by gedcom_id.
        log_entries: Audit log rows matching the time filter.
        messages: Message rows matching the time filter.
        change_filter: The filter used to select the working set.
        name_resolver: Optional batched lookup of record display names.
    """
    changes: List[ChangeRecord] = field(default_factory=list)
    users: Dict[int, UserInfo] = field(default_factory=dict)
    trees: Dict[int, str] = field(default_factory=dict)
    log_entries: List[LogEntry] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    change_filter: Any = None
    name_resolver: Optional[NameResolver] = None

    @property
    def accepted_changes(self) -> List[ChangeRecord]:
        return [c for c in self.changes if c.is_accepted]

    def user_display_name(self, user_id: Optional[int]) -> str:
        """Real or login name of an actor; 'User #id' for unknown ids."""
        if user_id is None:
            return '<unknown>'
        user = self.users.get(user_id)
        return user.display_name if user else f"User #{user_id}"

    def user_login_name(self, user_id: Optional[int]) -> str:
        """Login name of an actor; 'Unknown' when not in the directory."""
        user = self.users.get(user_id) if user_id is not None else None
        return user.login_name if user else 'Unknown'

    def tree_name(self, gedcom_id: int) -> str:
        return self.trees.get(gedcom_id, str(gedcom_id))

    def resolve_names(self, keys: Iterable[RecordKey]) -> Dict[RecordKey, str]:
        """Resolve record display names in one batch; empty without a resolver."""
        keys = list(dict.fromkeys(keys))
        if not keys or self.name_resolver is None:
            return {}
        return self.name_resolver(keys)

    @classmethod
    def from_store(cls, store: Any, change_filter: Any) -> ChangeDataset:
        """
        Fetch the working set for a filter from a ChangeStore.

        Args:
            store: Object implementing the ChangeStore protocol.
            change_filter: ChangeFilter selecting the rows.

        Returns:
            ChangeDataset: Dataset ready for the statistics pipeline.
        """
        changes = store.fetch_changes(change_filter)
        logger.debug(f"Loaded {len(changes)} change rows from store")
        return cls(
            changes=changes,
            users=store.fetch_users(),
            trees=store.fetch_tree_names(),
            log_entries=store.fetch_log_entries(change_filter),
            messages=store.fetch_messages(change_filter),
            change_filter=change_filter,
            name_resolver=store.record_names,
        )
