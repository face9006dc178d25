"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and the PIN hasher. Services are intentionally thin: they validate and
normalize input, call repositories and translate database failures into
the error kinds defined in `errors`. Every service works on the session
it is constructed with, so a test can hand in any session it likes.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from . import models, repositories
from .errors import DuplicateError, InvalidCredentials, NotFoundError, StoreError, ValidationError
from .schemas import QuestionIn
from .security import hash_pin, verify_pin

logger = logging.getLogger("questionbank.services")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# largest LIMIT/OFFSET a signed 64-bit driver parameter can carry
MAX_ROW_OFFSET = 2 ** 63 - 1
OPTIONAL_QUESTION_FIELDS = ("difficulty", "answer", "code")


def _positive_int(value: Optional[str], default: int, name: str) -> int:
    """Parse a pagination value from the query string.

    Blank or missing values fall back to `default`.
    """
    if value is None or not str(value).strip():
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{name} must be a positive integer")
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return number


def _optional_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or not str(value).strip():
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


class AuthService:
    """Registration and login against the `users` table."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, email: Optional[str], pin: Optional[str]) -> Dict[str, str]:
        """Create a user with a hashed PIN.

        The email lookup gives the friendly duplicate error; the primary key
        on `users.email` catches the case where two registrations race.
        """
        logger.info("register request received: %s", email)
        if not email or not pin:
            raise ValidationError("Email and PIN are required", key="error")
        try:
            if self.user_repo.get_by_email(email) is not None:
                raise DuplicateError("Email already registered", key="error")
            self.user_repo.create(models.User(email=email, pin_hash=hash_pin(pin)))
        except IntegrityError:
            self.session.rollback()
            raise DuplicateError("Email already registered", key="error")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error during registration")
            raise StoreError(f"Database error: {e}", key="error")
        return {"message": "User registered successfully"}

    def login(self, email: Optional[str], pin: Optional[str]) -> Dict[str, str]:
        """Check an email/PIN pair. Nothing is issued on success."""
        if not email or not pin:
            raise InvalidCredentials("Invalid email or PIN", key="error")
        try:
            user = self.user_repo.get_by_email(email)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("error fetching user")
            raise StoreError("Database error", key="error")
        # same response for unknown email and wrong PIN
        if user is None or not verify_pin(pin, user.pin_hash):
            logger.info("failed login for %s", email)
            raise InvalidCredentials("Invalid email or PIN", key="error")
        return {"message": "Login successful"}


class CatalogService:
    """Read-only listing of subjects ("courses")."""
    def __init__(self, session: Session):
        self.session = session
        self.subject_repo = repositories.SubjectRepository(session)

    def list_subjects(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return active subjects, filtered by name when `search` is not blank."""
        term = search if search and search.strip() else None
        try:
            subjects = self.subject_repo.list_active(term)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error fetching courses")
            raise StoreError("Error fetching courses", detail=str(e))
        return [s.model_dump() for s in subjects]


class QuestionService:
    """CRUD over questions, including tag aggregation and bulk insert."""
    def __init__(self, session: Session):
        self.session = session
        self.q_repo = repositories.QuestionRepository(session)

    def list_questions(self, subject_id: Optional[str] = None, page: Optional[str] = None,
                       limit: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return one page of questions, each with a comma-joined `tags` string."""
        subject = _optional_int(subject_id, "subject_id")
        page_no = _positive_int(page, DEFAULT_PAGE, "page")
        size = _positive_int(limit, DEFAULT_LIMIT, "limit")
        offset = (page_no - 1) * size
        if size > MAX_ROW_OFFSET or offset > MAX_ROW_OFFSET:
            raise ValidationError("page and limit are out of range")
        logger.info("fetching questions subject_id=%s page=%s limit=%s", subject, page_no, size)
        try:
            return self.q_repo.list_with_tags(subject, size, offset)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error fetching questions")
            raise StoreError("Error fetching questions", detail=str(e))

    def get_question(self, question_id: int) -> Dict[str, Any]:
        try:
            row = self.q_repo.get_with_subject(question_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error fetching question %s", question_id)
            raise StoreError("Error fetching question", detail=str(e))
        if row is None:
            raise NotFoundError("Question not found")
        return row

    def create_questions(self, payload: Any) -> Dict[str, Any]:
        """Insert a batch of questions in a single transaction.

        Returns a summary with the generated ids of every inserted row.
        """
        if not isinstance(payload, list) or not payload:
            raise ValidationError("Request body must be an array of questions")
        questions = []
        for idx, item in enumerate(payload):
            if isinstance(item, dict):
                # absent or falsy optional fields are stored as NULL
                item = {**item, **{field: item.get(field) or None for field in OPTIONAL_QUESTION_FIELDS}}
            try:
                data = QuestionIn.model_validate(item)
            except SchemaError as e:
                raise ValidationError(
                    f"Invalid question at index {idx}",
                    detail=e.errors(include_url=False, include_context=False, include_input=False),
                )
            questions.append(models.Question(**data.model_dump()))
        try:
            ids = self.q_repo.create_many(questions)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error creating questions")
            raise StoreError("Error creating questions", detail=str(e))
        return {"message": f"{len(ids)} questions created successfully", "inserted_ids": ids}

    def update_question(self, question_id: int, data: QuestionIn) -> Dict[str, str]:
        """Replace all six editable fields of a question."""
        try:
            found = self.q_repo.replace(question_id, data.model_dump())
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error updating question %s", question_id)
            raise StoreError("Error updating question", detail=str(e))
        if not found:
            raise NotFoundError("Question not found")
        return {"message": "Question updated successfully"}

    def delete_question(self, question_id: int) -> Dict[str, str]:
        try:
            found = self.q_repo.delete(question_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("error deleting question %s", question_id)
            raise StoreError("Error deleting question", detail=str(e))
        if not found:
            raise NotFoundError("Question not found")
        return {"message": "Question deleted successfully"}
