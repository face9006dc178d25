"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
subjects, questions). Repositories build parameterized SQLAlchemy
statements, return plain rows or SQLModel objects and commit where
appropriate. Error handling is left to the services.
"""

from typing import Any, Dict, List, Optional
from sqlmodel import Session, select, col
from sqlalchemy import func
from . import models

QUESTION_COLUMNS = (
    models.Question.question_id,
    models.Question.title,
    models.Question.content,
    models.Question.difficulty,
    models.Question.answer,
    models.Question.code,
)


class UserRepository:
    """Lookup and creation of `User` records."""
    def __init__(self, session: Session):
        self.session = session

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        return user


class SubjectRepository:
    """Read-only queries over `Subject` records."""
    def __init__(self, session: Session):
        self.session = session

    def list_active(self, search: Optional[str] = None) -> List[models.Subject]:
        """Return active subjects, optionally filtered by a name substring."""
        stmt = select(models.Subject).where(models.Subject.status == "Active")
        if search:
            stmt = stmt.where(col(models.Subject.name).like(f"%{search}%"))
        stmt = stmt.order_by(models.Subject.subject_id)
        return list(self.session.exec(stmt).all())


class QuestionRepository:
    """CRUD operations for `Question` records and their tag aggregates."""
    def __init__(self, session: Session):
        self.session = session

    def list_with_tags(self, subject_id: Optional[int], limit: int, offset: int) -> List[Dict[str, Any]]:
        """Return one page of questions with subject name and joined tags.

        Questions whose subject is missing are excluded (inner join);
        questions without tags are kept with `tags` set to `None`.
        """
        stmt = (
            select(
                *QUESTION_COLUMNS,
                col(models.Subject.name).label("subject"),
                func.group_concat(models.Tag.name).label("tags"),
            )
            .join(models.Subject, models.Question.subject_id == models.Subject.subject_id)
            .outerjoin(models.QuestionTag, models.QuestionTag.question_id == models.Question.question_id)
            .outerjoin(models.Tag, models.QuestionTag.tag_id == models.Tag.tag_id)
        )
        if subject_id is not None:
            stmt = stmt.where(models.Question.subject_id == subject_id)
        stmt = (
            stmt.group_by(models.Question.question_id, models.Subject.name)
            .order_by(models.Question.question_id)
            .limit(limit)
            .offset(offset)
        )
        return [dict(row._mapping) for row in self.session.exec(stmt).all()]

    def get_with_subject(self, question_id: int) -> Optional[Dict[str, Any]]:
        """Return a single question with its subject name inlined."""
        stmt = (
            select(*QUESTION_COLUMNS, col(models.Subject.name).label("subject"))
            .join(models.Subject, models.Question.subject_id == models.Subject.subject_id)
            .where(models.Question.question_id == question_id)
        )
        row = self.session.exec(stmt).first()
        return dict(row._mapping) if row is not None else None

    def create_many(self, questions: List[models.Question]) -> List[int]:
        """Insert all questions in one transaction and return their ids."""
        self.session.add_all(questions)
        self.session.commit()
        for q in questions:
            self.session.refresh(q)
        return [q.question_id for q in questions]

    def replace(self, question_id: int, values: Dict[str, Any]) -> bool:
        """Overwrite every field of a question.

        Returns False (and changes nothing) when the question does not exist.
        """
        question = self.session.get(models.Question, question_id)
        if question is None:
            return False
        for field, value in values.items():
            setattr(question, field, value)
        self.session.add(question)
        self.session.commit()
        return True

    def delete(self, question_id: int) -> bool:
        """Delete a question together with its tag associations."""
        question = self.session.get(models.Question, question_id)
        if question is None:
            return False
        links = self.session.exec(
            select(models.QuestionTag).where(models.QuestionTag.question_id == question_id)
        ).all()
        for link in links:
            self.session.delete(link)
        # no relationship() ties the two tables, so flush links first
        self.session.flush()
        self.session.delete(question)
        self.session.commit()
        return True
