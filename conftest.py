"""
Fixtures compartidas para las pruebas.
Uses an in-memory SQLite database so PostgreSQL is not required.
"""
import pytest
from fastapi.testclient import TestClient

from qbank.crud import crud_material, crud_question
from qbank.crud.crud_catalog import catalog
from qbank.db.seed_reference import seed_question_types
from qbank.db.session import Database
from qbank.main import create_app
from qbank.schemas.material import MaterialCreate
from qbank.schemas.question import QuestionCreate

# Ids asignados por seed_question_types sobre una base vacía
SINGLE_CHOICE = 1
MULTIPLE_CHOICE = 2
TRUE_FALSE = 3
FILL_BLANK = 4
SHORT_ANSWER = 5


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_all()
    with database.session() as db:
        seed_question_types(db)
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def client(database):
    app = create_app(database)
    with TestClient(app) as test_client:
        yield test_client


def single_choice_payload(stem="细胞的能量工厂是？", **overrides) -> QuestionCreate:
    data = {
        "type_id": SINGLE_CHOICE,
        "stem": stem,
        "explanation": "线粒体进行有氧呼吸",
        "options": [
            {"opt_label": "A", "opt_content": "线粒体", "is_correct": True, "sort_order": 1},
            {"opt_label": "B", "opt_content": "叶绿体", "sort_order": 2},
            {"opt_label": "C", "opt_content": "核糖体", "sort_order": 3},
        ],
    }
    data.update(overrides)
    return QuestionCreate(**data)


@pytest.fixture
def make_question(db):
    def _make(stem="细胞的能量工厂是？", **overrides):
        return crud_question.create_question(db, single_choice_payload(stem, **overrides))
    return _make


@pytest.fixture
def make_source(db):
    def _make(name="全国中学生生物学联赛"):
        return catalog.create_source(db, name)
    return _make


@pytest.fixture
def make_tag(db):
    def _make(name="细胞生物学"):
        return catalog.create_tag(db, name)
    return _make


@pytest.fixture
def make_material(db):
    def _make(title="光合作用实验", sub_stems=("第一问", "第二问"), **overrides):
        data = {
            "title": title,
            "content": "某同学用黑藻进行光合作用实验……",
            "questions": [
                {"type_id": SHORT_ANSWER, "stem": stem, "answer": f"{stem}的答案"} for stem in sub_stems
            ],
        }
        data.update(overrides)
        return crud_material.create_material(db, MaterialCreate(**data))
    return _make
