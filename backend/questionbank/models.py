"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Table and column names follow the existing relational schema
(`users`, `subjects`, `questions`, `tags`, `question_tags`).
"""

from typing import Optional
from sqlalchemy import Column, String, Text
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email`: login name; the primary key doubles as the uniqueness guard
    - `pin_hash`: hashed PIN stored in the `pin` column (never plaintext)
    """
    __tablename__ = "users"

    email: str = Field(primary_key=True, max_length=255)
    pin_hash: str = Field(sa_column=Column("pin", String(255), nullable=False))


class Subject(SQLModel, table=True):
    """A course/subject. Read-only for the API; seeded externally."""
    __tablename__ = "subjects"

    subject_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    status: str = Field(default="Active", max_length=32, index=True)


class Question(SQLModel, table=True):
    """A question belonging to exactly one subject."""
    __tablename__ = "questions"

    question_id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    content: str = Field(sa_column=Column(Text, nullable=False))
    subject_id: int = Field(foreign_key="subjects.subject_id", index=True)
    difficulty: Optional[str] = Field(default=None, max_length=64)
    answer: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    code: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    tag_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)


class QuestionTag(SQLModel, table=True):
    """Many-to-many association between questions and tags."""
    __tablename__ = "question_tags"

    question_id: int = Field(foreign_key="questions.question_id", primary_key=True)
    tag_id: int = Field(foreign_key="tags.tag_id", primary_key=True)
