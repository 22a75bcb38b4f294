# qbank/models/question_bank.py
from sqlalchemy import (
    Boolean, Column, Integer, String, Text, ForeignKey,
    TIMESTAMP, UniqueConstraint, Index, func
)
from sqlalchemy.orm import relationship

from qbank.db.base import Base


class QuestionType(Base):
    __tablename__ = 'question_types'

    id = Column(Integer, primary_key=True)
    type_name = Column(String(50), nullable=False, unique=True)


class Source(Base):
    __tablename__ = 'sources'

    id = Column(Integer, primary_key=True)
    source_name = Column(String(255), nullable=False, unique=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)


class Tag(Base):
    __tablename__ = 'tags'

    id = Column(Integer, primary_key=True)
    tag_name = Column(String(100), nullable=False, unique=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)


class Option(Base):
    __tablename__ = 'options'
    __table_args__ = (
        UniqueConstraint('question_id', 'opt_label', name='uq_options_question_label'),
        # Ids borrados no se reutilizan en SQLite
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), nullable=False, index=True)
    opt_label = Column(String(10), nullable=False)
    opt_content = Column(Text, nullable=False, default='')
    is_correct = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    question = relationship("Question", back_populates="options")


class QuestionTag(Base):
    __tablename__ = 'question_tags'

    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True)
    tag_id = Column(Integer, ForeignKey('tags.id', ondelete='RESTRICT'), primary_key=True, index=True)


class Question(Base):
    __tablename__ = 'questions'
    __table_args__ = (
        Index('ix_questions_created_at', 'created_at'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True)
    type_id = Column(Integer, ForeignKey('question_types.id', ondelete='RESTRICT'), nullable=False, index=True)
    stem = Column(Text, nullable=False)
    answer = Column(Text, nullable=True)
    explanation = Column(Text, nullable=True)
    source_id = Column(Integer, ForeignKey('sources.id', ondelete='RESTRICT'), nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    question_type = relationship("QuestionType")
    source = relationship("Source")
    options = relationship(
        "Option", back_populates="question",
        order_by=[Option.sort_order, Option.opt_label],
        cascade="all, delete-orphan", passive_deletes=True,
    )
    tag_links = relationship("QuestionTag", cascade="all, delete-orphan", passive_deletes=True)
    tags = relationship("Tag", secondary="question_tags", order_by=Tag.tag_name, viewonly=True)

    @property
    def type_name(self):
        return self.question_type.type_name if self.question_type else None

    @property
    def source_name(self):
        return self.source.source_name if self.source else None

    def __repr__(self):
        return f"<Question(id={self.id}, stem='{(self.stem or '')[:30]}...')>"


class Material(Base):
    __tablename__ = 'materials'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    source_id = Column(Integer, ForeignKey('sources.id', ondelete='SET NULL'), nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    source = relationship("Source")
    question_links = relationship(
        "MaterialQuestion", back_populates="material",
        order_by="MaterialQuestion.sub_no",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def source_name(self):
        return self.source.source_name if self.source else None

    @property
    def questions(self):
        """Sub-questions in sub_no order."""
        return [link.question for link in self.question_links]


class MaterialQuestion(Base):
    __tablename__ = 'material_questions'

    material_id = Column(Integer, ForeignKey('materials.id', ondelete='CASCADE'), primary_key=True)
    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True, index=True)
    sub_no = Column(Integer, nullable=False)

    material = relationship("Material", back_populates="question_links")
    question = relationship("Question")
