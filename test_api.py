"""
End-to-end tests for the HTTP API using FastAPI's TestClient over SQLite.
"""
from urllib.parse import quote

from fastapi.testclient import TestClient

from conftest import SHORT_ANSWER, SINGLE_CHOICE
from qbank.crud.crud_catalog import CRUDCatalog
from qbank.main import create_app


def create_question(client, **overrides):
    payload = {
        "type_id": SINGLE_CHOICE,
        "stem": "光合作用的场所是？",
        "options": [
            {"opt_label": "A", "opt_content": "叶绿体", "is_correct": True},
            {"opt_label": "B", "opt_content": "线粒体"},
        ],
    }
    payload.update(overrides)
    response = client.post("/api/questions", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["data"]["id"]


def test_question_types(client):
    response = client.get("/api/question-types")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [t["type_name"] for t in body["data"]] == ["单选题", "多选题", "判断题", "填空题", "简答题"]


def test_question_crud_round(client):
    tag_id = client.post("/api/tags", json={"tag_name": "植物生理"}).json()["data"]["id"]
    question_id = create_question(client, tag_ids=[tag_id])

    detail = client.get(f"/api/questions/{question_id}").json()["data"]
    assert detail["type_name"] == "单选题"
    assert [o["opt_label"] for o in detail["options"]] == ["A", "B"]
    assert [t["tag_name"] for t in detail["tags"]] == ["植物生理"]

    response = client.put(f"/api/questions/{question_id}", json={"stem": "新题干", "tag_ids": []})
    assert response.status_code == 200
    assert response.json()["data"]["stem"] == "新题干"
    assert response.json()["data"]["tags"] == []

    assert client.delete(f"/api/questions/{question_id}").json() == {
        "success": True, "data": None, "message": "Question deleted", "error": None,
    }
    assert client.get(f"/api/questions/{question_id}").status_code == 404


def test_question_listing_envelope(client):
    for i in range(3):
        create_question(client, stem=f"题目{i}")

    response = client.get("/api/questions", params={"page": 1, "pageSize": 2})
    assert response.status_code == 200
    data = response.json()["data"]
    assert [q["stem"] for q in data["questions"]] == ["题目2", "题目1"]
    assert data["pagination"] == {"total": 3, "page": 1, "pageSize": 2, "totalPages": 2}


def test_question_listing_by_tags(client):
    tag_id = client.post("/api/tags", json={"tag_name": "酶"}).json()["data"]["id"]
    create_question(client, stem="有标签", tag_ids=[tag_id])
    create_question(client, stem="无标签")

    data = client.get("/api/questions", params={"tag_ids": f"{tag_id}"}).json()["data"]
    assert [q["stem"] for q in data["questions"]] == ["有标签"]


def test_bad_requests_return_400(client):
    for response in (
        client.get("/api/questions", params={"page": 0}),
        client.get("/api/questions", params={"tag_ids": "1,x"}),
        client.post("/api/questions", json={"type_id": SINGLE_CHOICE}),
        client.post("/api/questions", json={"type_id": "not-a-number", "stem": "x"}),
        client.post("/api/sources", json={"source_name": "  "}),
    ):
        assert response.status_code == 400, response.text
        assert response.json()["success"] is False


def test_not_found_envelope(client):
    response = client.get("/api/questions/12345")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Question 12345 not found"


def test_unknown_tag_is_a_persistence_error(client):
    response = client.post("/api/questions", json={"type_id": SINGLE_CHOICE, "stem": "x", "tag_ids": [77]})
    assert response.status_code == 500
    assert response.json()["success"] is False
    assert client.get("/api/questions").json()["data"]["pagination"]["total"] == 0


def test_source_in_use_cannot_be_deleted(client):
    source_id = client.post("/api/sources", json={"source_name": "联赛"}).json()["data"]["id"]
    create_question(client, source_id=source_id)

    response = client.delete(f"/api/sources/{source_id}")
    assert response.status_code == 400
    assert response.json()["success"] is False

    sources = client.get("/api/sources", params={"search": "联"}).json()["data"]
    assert [s["source_name"] for s in sources] == ["联赛"]


def test_rename_tag(client):
    tag_id = client.post("/api/tags", json={"tag_name": "旧"}).json()["data"]["id"]
    response = client.put(f"/api/tags/{tag_id}", json={"tag_name": " 新 "})
    assert response.status_code == 200
    assert response.json()["data"]["tag_name"] == "新"


def test_materials_endpoints(client):
    payload = {
        "title": "遗传图谱",
        "content": "某家系中……",
        "questions": [
            {"type_id": SHORT_ANSWER, "stem": "判断遗传方式"},
            {"type_id": SHORT_ANSWER, "stem": "计算概率"},
        ],
    }
    material_id = client.post("/api/materials", json=payload).json()["data"]["id"]

    detail = client.get(f"/api/materials/{material_id}").json()["data"]
    assert [q["stem"] for q in detail["questions"]] == ["判断遗传方式", "计算概率"]

    first_question_id = detail["questions"][0]["id"]
    data = client.get("/api/materials", params={"question_id": first_question_id}).json()["data"]
    assert [m["id"] for m in data["materials"]] == [material_id]
    assert data["pagination"] is None

    data = client.get("/api/materials").json()["data"]
    assert data["pagination"]["total"] == 1

    response = client.put(f"/api/materials/{material_id}", json={"questions": [{"type_id": SHORT_ANSWER, "stem": "唯一"}]})
    assert [q["stem"] for q in response.json()["data"]["questions"]] == ["唯一"]
    assert client.get(f"/api/questions/{first_question_id}").status_code == 404

    assert client.delete(f"/api/materials/{material_id}").status_code == 200
    assert client.get(f"/api/materials/{material_id}").status_code == 404


def test_paper_preview(client):
    question_id = create_question(client)
    material_id = client.post("/api/materials", json={
        "content": "材料",
        "questions": [{"type_id": SHORT_ANSWER, "stem": "小题"}],
    }).json()["data"]["id"]

    response = client.post("/api/papers/preview", json={
        "question_ids": [question_id],
        "material_ids": [material_id],
        "subtitle": "模拟一",
    })
    assert response.status_code == 200
    paper = response.json()["data"]
    assert paper["title"] == "生物竞赛试卷"
    assert paper["total_score"] == 20
    assert [s["name"] for s in paper["sections"]] == ["paper", "answer_key"]


def test_paper_requires_selection(client):
    response = client.post("/api/papers/preview", json={"question_ids": [], "material_ids": []})
    assert response.status_code == 400


def test_paper_with_unknown_id_is_not_found(client):
    response = client.post("/api/papers/preview", json={"question_ids": [404]})
    assert response.status_code == 404


def test_paper_export_download(client):
    question_id = create_question(client)

    response = client.post("/api/papers/export", json={"question_ids": [question_id], "title": "期中考试"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert response.headers["content-disposition"] == f"attachment; filename*=UTF-8''{quote('期中考试.docx')}"
    assert response.content[:2] == b"PK"


def test_health_and_metrics(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["services"]["database"]["status"] == "healthy"
    assert "X-Request-ID" in response.headers

    client.get("/api/question-types")
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "qbank_api_requests_total" in metrics.text


def test_second_page_of_fifteen(client):
    for i in range(15):
        create_question(client, stem=f"第{i}题")

    data = client.get("/api/questions", params={"page": 2, "pageSize": 10}).json()["data"]
    assert len(data["questions"]) == 5
    assert data["pagination"]["totalPages"] == 2
    assert data["pagination"]["total"] == 15


def test_second_page_rows_keep_options_and_tags(client):
    cell = client.post("/api/tags", json={"tag_name": "cell"}).json()["data"]["id"]
    gene = client.post("/api/tags", json={"tag_name": "genetics"}).json()["data"]["id"]
    create_question(client, stem="旧题", tag_ids=[gene, cell])
    create_question(client, stem="判断", type_id=SHORT_ANSWER, options=[])
    create_question(client, stem="新题", tag_ids=[cell])

    data = client.get("/api/questions", params={"page": 2, "pageSize": 2}).json()["data"]
    assert data["pagination"] == {"total": 3, "page": 2, "pageSize": 2, "totalPages": 2}
    [row] = data["questions"]
    assert row["stem"] == "旧题"
    assert [o["opt_label"] for o in row["options"]] == ["A", "B"]
    assert [t["tag_name"] for t in row["tags"]] == ["cell", "genetics"]


def test_persistence_error_hides_driver_message(client):
    response = client.post("/api/questions", json={"type_id": SINGLE_CHOICE, "stem": "x", "tag_ids": [77]})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Database operation failed"}
    assert "FOREIGN KEY" not in response.text


def test_unexpected_error_returns_json_500(database, monkeypatch):
    def broken(self, db):
        raise RuntimeError("boom")

    monkeypatch.setattr(CRUDCatalog, "get_question_types", broken)
    with TestClient(create_app(database), raise_server_exceptions=False) as client:
        response = client.get("/api/question-types")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "error": "Internal server error"}
    assert "boom" not in response.text
