"""
Tests for the Word exporter and the LaTeX stripping it applies to rich text.
"""
import io
from types import SimpleNamespace

import pytest
from docx import Document

from qbank.services.paper_compiler import compile_paper
from qbank.services.word_exporter import export_paper_to_docx, strip_latex


@pytest.mark.parametrize("raw,expected", [
    (None, ""),
    ("", ""),
    ("没有公式", "没有公式"),
    ("面积为 $x^2$ 平方米", "面积为 x^2 平方米"),
    ("$$E=mc^2$$", "E=mc^2"),
    (r"\[ a + b \]", "a + b"),
    (r"\(\alpha\) 粒子", "粒子"),
    (r"$\frac{1}{2}$", "12"),
    (r"$$\sqrt{4}$$ 与 $y$", "4 与 y"),
])
def test_strip_latex(raw, expected):
    assert strip_latex(raw) == expected


def build_paper():
    q = SimpleNamespace(
        stem="已知 $x^2=4$，求 x",
        type_name="简答题",
        options=[],
        answer="$x=2$",
        explanation=None,
    )
    return compile_paper([q], [], title="单元测验", subtitle="第一章")


def open_docx(content: bytes):
    return Document(io.BytesIO(content))


def test_export_produces_docx_package():
    content = export_paper_to_docx(build_paper())
    assert content[:2] == b"PK"

    document = open_docx(content)
    assert document.core_properties.title == "单元测验"


def test_export_writes_both_sections_with_page_break():
    document = open_docx(export_paper_to_docx(build_paper()))
    paragraphs = document.paragraphs
    texts = [p.text for p in paragraphs]

    assert texts[0] == "单元测验"
    assert paragraphs[0].style.name == "Title"
    assert "第一章" in texts
    assert "—————— 试卷结束 ——————" in texts
    assert texts[-1] == "—————— 答案结束 ——————"

    break_index = next(i for i, p in enumerate(paragraphs) if 'w:type="page"' in p._p.xml)
    answer_title_index = texts.index("单元测验 - 答案与解析")
    assert texts.index("—————— 试卷结束 ——————") < break_index < answer_title_index


def test_export_strips_latex_from_rich_text():
    texts = [p.text for p in open_docx(export_paper_to_docx(build_paper())).paragraphs]

    assert "已知 x^2=4，求 x" in texts
    assert "答案：x=2" in texts
    assert not any("$" in t for t in texts)


def test_export_applies_run_formatting():
    document = open_docx(export_paper_to_docx(build_paper()))
    header = next(p for p in document.paragraphs if p.text == "1. [简答题] (10分)")

    number_run, type_run, score_run = header.runs
    assert number_run.bold
    assert number_run.font.size.pt == 14
    assert str(type_run.font.color.rgb) == "0066CC"
    assert score_run.font.size.pt == 12
