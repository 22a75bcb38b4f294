"""
Tests for paper compilation. The compiler only reads attributes, so plain
namespaces stand in for stored questions and materials.
"""
from types import SimpleNamespace

from qbank.services.paper_compiler import NO_ANSWER, compile_paper, resolve_answer


def option(label, content, correct=False):
    return SimpleNamespace(opt_label=label, opt_content=content, is_correct=correct)


def question(stem, type_name="单选题", options=(), answer=None, explanation=None):
    return SimpleNamespace(
        stem=stem, type_name=type_name, options=list(options), answer=answer, explanation=explanation
    )


def material(content, sub_questions, title=None):
    return SimpleNamespace(title=title, content=content, questions=list(sub_questions))


def section_texts(paper, name):
    section = next(s for s in paper.sections if s.name == name)
    return [block.text for block in section.blocks]


def sample_paper(**kwargs):
    questions = [
        question("细胞的能量工厂是？", options=[option("A", "线粒体", True), option("B", "叶绿体")],
                 explanation="有氧呼吸的主要场所"),
        question("DNA 双螺旋结构由谁提出？", type_name="简答题", answer="沃森和克里克"),
    ]
    materials = [
        material("阅读下列材料……", [
            question("第一小题", type_name="判断题", options=[option("A", "对"), option("B", "错", True)]),
            question("第二小题", type_name="简答题"),
            question("第三小题", type_name="简答题", answer="略"),
        ]),
    ]
    return compile_paper(questions, materials, title="期末测试", **kwargs)


def test_resolve_answer_prefers_explicit_answer():
    q = question("x", options=[option("A", "a", True)], answer="C")
    assert resolve_answer(q) == "C"


def test_resolve_answer_joins_correct_labels():
    q = question("x", options=[option("A", "a", True), option("B", "b"), option("C", "c", True)])
    assert resolve_answer(q) == "A、C"


def test_resolve_answer_falls_back_when_nothing_marked():
    assert resolve_answer(question("x", options=[option("A", "a")])) == NO_ANSWER
    assert resolve_answer(question("x")) == "暂无答案"


def test_total_score_counts_questions_and_sub_questions():
    paper = sample_paper()
    assert paper.total_score == 50
    assert "考试时间：120分钟 总分：50分" in section_texts(paper, "paper")


def test_score_and_duration_are_configurable():
    paper = sample_paper(score_per_item=5, duration_minutes=90)
    assert paper.total_score == 25
    assert "考试时间：90分钟 总分：25分" in section_texts(paper, "paper")


def test_paper_numbering_and_headers():
    texts = section_texts(sample_paper(), "paper")

    assert texts[0] == "期末测试"
    assert "1. [单选题] (10分)" in texts
    assert "2. [简答题] (10分)" in texts
    assert "3. [材料题] (30分)" in texts
    # Título vacío del material
    assert "材料题" in texts
    assert "(1) [判断题] (10分)" in texts
    assert "(3) [简答题] (10分)" in texts
    assert texts[-1] == "—————— 试卷结束 ——————"


def test_paper_section_hides_answers():
    texts = section_texts(sample_paper(), "paper")

    assert "A. 线粒体" in texts
    assert not any("✓" in t for t in texts)
    assert not any("沃森和克里克" in t for t in texts)
    assert texts.count("答案：") == 5


def test_answer_key_marks_correct_options_and_explanations():
    texts = section_texts(sample_paper(), "answer_key")

    assert texts[0] == "期末测试 - 答案与解析"
    assert "A. 线粒体 ✓ 正确答案" in texts
    assert "B. 叶绿体" in texts
    assert "答案：A" in texts
    assert "答案：沃森和克里克" in texts
    assert "答案：B" in texts
    assert "答案：暂无答案" in texts
    assert "有氧呼吸的主要场所" in texts
    assert texts.count("解析：") == 1
    assert texts[-1] == "—————— 答案结束 ——————"


def test_subtitle_block_only_when_present():
    without = section_texts(sample_paper(), "paper")
    with_subtitle = section_texts(sample_paper(subtitle="高二生物"), "paper")

    assert len(with_subtitle) == len(without) + 1
    assert with_subtitle[1] == "高二生物"


def test_rich_text_is_passed_through_and_flagged():
    paper = compile_paper([question("求 $x^2$ 的值")], [], title="T")
    section = paper.sections[0]
    stem_block = next(b for b in section.blocks if b.text == "求 $x^2$ 的值")
    assert stem_block.runs[0].rich is True


def test_colours_follow_item_kind():
    section = sample_paper().sections[1]
    header = next(b for b in section.blocks if b.text == "3. [材料题] (30分)")
    assert header.runs[1].color == "FF6600"
    correct = next(b for b in section.blocks if b.text == "A. 线粒体 ✓ 正确答案")
    assert {run.color for run in correct.runs} == {"00AA00"}
