"""
Contact form validation and lead storage.

Leads are kept in memory during development and in SQLite when a database
path is configured. The calculator snapshot attached to a lead is stored
as-is and never parsed here.
"""

import logging
import re
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import closing, contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class Topic(str, Enum):
    PROPOSAL = 'PROPOSAL'
    O_M = 'O_M'
    STORAGE = 'STORAGE'
    GENERAL = 'GENERAL'


TOPIC_LABELS = {
    Topic.PROPOSAL: 'Request a Proposal',
    Topic.O_M: 'Operations & Maintenance',
    Topic.STORAGE: 'Battery Storage',
    Topic.GENERAL: 'General Inquiry',
}


def _invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError('invalid_field', message)


class ContactSubmissionData(BaseModel):
    """Validated contact form fields."""
    full_name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    topic: Topic
    message: str
    calculator_context: Optional[str] = None
    consent: bool

    @field_validator('full_name')
    @classmethod
    def check_full_name(cls, value: str) -> str:
        if len(value) < 2:
            raise _invalid('Full name must be at least 2 characters')
        return value

    @field_validator('email')
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise _invalid('Please enter a valid email address')
        return value

    @field_validator('phone', 'company', 'calculator_context', mode='before')
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('topic', mode='before')
    @classmethod
    def check_topic(cls, value: Any) -> Any:
        if isinstance(value, Topic):
            return value
        if value not in {topic.value for topic in Topic}:
            raise _invalid('Please select a valid topic')
        return value

    @field_validator('message')
    @classmethod
    def check_message(cls, value: str) -> str:
        if len(value) < 10:
            raise _invalid('Message must be at least 10 characters')
        return value

    @field_validator('consent')
    @classmethod
    def check_consent(cls, value: bool) -> bool:
        if value is not True:
            raise _invalid('You must consent to data processing')
        return value


@dataclass
class ContactSubmission:
    """A stored lead."""
    id: str
    full_name: str
    email: str
    topic: Topic
    message: str
    consent: bool
    created_at: datetime
    phone: Optional[str] = None
    company: Optional[str] = None
    calculator_context: Optional[str] = None


class ContactRepository(ABC):
    """Storage for contact submissions."""

    @abstractmethod
    def create(self, data: ContactSubmissionData) -> ContactSubmission:
        ...

    @abstractmethod
    def find_by_id(self, submission_id: str) -> Optional[ContactSubmission]:
        ...

    @abstractmethod
    def find_all(self) -> List[ContactSubmission]:
        """All submissions, newest first."""

    @abstractmethod
    def find_by_email(self, email: str) -> List[ContactSubmission]:
        """Submissions for an email address, newest first."""

    @abstractmethod
    def delete(self, submission_id: str) -> bool:
        """Delete a submission. Returns False if it did not exist."""


def _newest_first(submissions: List[ContactSubmission]) -> List[ContactSubmission]:
    # Reverse first so submissions created in the same instant keep newest-first order
    return sorted(reversed(submissions), key=lambda s: s.created_at, reverse=True)


class MemoryContactRepository(ContactRepository):
    """In-process store used when no database is configured."""

    def __init__(self):
        self._submissions: List[ContactSubmission] = []
        self._next_id = 1

    def create(self, data: ContactSubmissionData) -> ContactSubmission:
        submission = ContactSubmission(
            id=f"mem_{self._next_id}",
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            company=data.company,
            topic=data.topic,
            message=data.message,
            calculator_context=data.calculator_context,
            consent=data.consent,
            created_at=datetime.now(timezone.utc),
        )
        self._next_id += 1
        self._submissions.append(submission)
        return submission

    def find_by_id(self, submission_id: str) -> Optional[ContactSubmission]:
        for submission in self._submissions:
            if submission.id == submission_id:
                return submission
        return None

    def find_all(self) -> List[ContactSubmission]:
        return _newest_first(self._submissions)

    def find_by_email(self, email: str) -> List[ContactSubmission]:
        return _newest_first([s for s in self._submissions if s.email == email])

    def delete(self, submission_id: str) -> bool:
        submission = self.find_by_id(submission_id)
        if submission is None:
            return False
        self._submissions.remove(submission)
        return True


class SQLiteContactRepository(ContactRepository):
    """
    SQLite-backed store.

    A connection is opened per operation so the repository can be shared
    across Streamlit script runs.
    """

    COLUMNS = (
        'id, full_name, email, phone, company, topic, message, '
        'calculator_context, consent, created_at'
    )

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_database()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def _initialize_database(self):
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS contact_submissions (
                    id TEXT PRIMARY KEY,
                    full_name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT,
                    company TEXT,
                    topic TEXT NOT NULL,
                    message TEXT NOT NULL,
                    calculator_context TEXT,
                    consent INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_contact_email ON contact_submissions (email)"
            )
        logger.debug("Contact database ready at %s", self.db_path)

    @staticmethod
    def _row_to_submission(row: sqlite3.Row) -> ContactSubmission:
        return ContactSubmission(
            id=row['id'],
            full_name=row['full_name'],
            email=row['email'],
            phone=row['phone'],
            company=row['company'],
            topic=Topic(row['topic']),
            message=row['message'],
            calculator_context=row['calculator_context'],
            consent=bool(row['consent']),
            created_at=datetime.fromisoformat(row['created_at']),
        )

    def create(self, data: ContactSubmissionData) -> ContactSubmission:
        submission = ContactSubmission(
            id=uuid.uuid4().hex,
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            company=data.company,
            topic=data.topic,
            message=data.message,
            calculator_context=data.calculator_context,
            consent=data.consent,
            created_at=datetime.now(timezone.utc),
        )
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO contact_submissions ({self.COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    submission.id,
                    submission.full_name,
                    submission.email,
                    submission.phone,
                    submission.company,
                    submission.topic.value,
                    submission.message,
                    submission.calculator_context,
                    int(submission.consent),
                    submission.created_at.isoformat(),
                ),
            )
        return submission

    def find_by_id(self, submission_id: str) -> Optional[ContactSubmission]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {self.COLUMNS} FROM contact_submissions WHERE id = ?",
                (submission_id,),
            ).fetchone()
        return self._row_to_submission(row) if row else None

    def find_all(self) -> List[ContactSubmission]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {self.COLUMNS} FROM contact_submissions "
                "ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [self._row_to_submission(row) for row in rows]

    def find_by_email(self, email: str) -> List[ContactSubmission]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {self.COLUMNS} FROM contact_submissions WHERE email = ? "
                "ORDER BY created_at DESC, rowid DESC",
                (email,),
            ).fetchall()
        return [self._row_to_submission(row) for row in rows]

    def delete(self, submission_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM contact_submissions WHERE id = ?", (submission_id,)
            )
        return cursor.rowcount > 0


def get_contact_repository(db_path: Optional[str] = None) -> ContactRepository:
    """SQLite repository when a database path is configured, memory otherwise."""
    if db_path:
        return SQLiteContactRepository(db_path)
    return MemoryContactRepository()


@dataclass
class ContactFormState:
    """Outcome of a contact form submission."""
    success: bool = False
    error: Optional[str] = None
    field_errors: Dict[str, List[str]] = field(default_factory=dict)


def submit_contact_form(
    form_data: Dict[str, Any],
    repository: ContactRepository
) -> ContactFormState:
    """
    Validate and store a contact form submission.

    Args:
        form_data: Raw form values keyed by field name
        repository: Where to store the lead

    Returns:
        ContactFormState describing success or the errors to show
    """
    try:
        data = ContactSubmissionData(**form_data)
    except ValidationError as e:
        field_errors: Dict[str, List[str]] = {}
        for err in e.errors():
            name = str(err['loc'][0]) if err['loc'] else '__root__'
            field_errors.setdefault(name, []).append(err['msg'])
        return ContactFormState(
            error='Please correct the errors below',
            field_errors=field_errors
        )

    try:
        submission = repository.create(data)
    except sqlite3.Error:
        logger.exception("Contact form submission could not be stored")
        return ContactFormState(
            error='An error occurred while submitting your message. Please try again.'
        )

    logger.info("Stored contact submission %s (topic %s)", submission.id, submission.topic.value)
    return ContactFormState(success=True)
