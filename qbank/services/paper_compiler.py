# qbank/services/paper_compiler.py
"""
Compilación de exámenes: convierte preguntas y materiales seleccionados en un
documento con dos secciones (examen y hoja de respuestas).

El resultado es un PaperDocument independiente del formato de salida; el
exportador a Word lo recorre bloque por bloque.
"""
import logging
from typing import List, Optional, Sequence

from qbank.schemas.paper import Block, PaperDocument, PaperSection, TextRun

logger = logging.getLogger(__name__)

# Colores de texto (hex RGB)
COLOR_TYPE = "0066CC"
COLOR_MATERIAL = "FF6600"
COLOR_CORRECT = "00AA00"
COLOR_DEFAULT = "000000"
COLOR_ANSWER_LINE = "CCCCCC"

# Tamaños en medios puntos
SIZE_NUMBER = 28
SIZE_HEADER = 24
SIZE_SUB_HEADER = 20

ANSWER_LINE = "_________________________________"
NO_ANSWER = "暂无答案"
MATERIAL_LABEL = "材料题"
END_OF_PAPER = "—————— 试卷结束 ——————"
END_OF_ANSWERS = "—————— 答案结束 ——————"


def resolve_answer(question) -> str:
    """
    Respuesta a mostrar en la hoja de respuestas.

    Usa `answer` si no está vacío; si no, las etiquetas de las opciones
    correctas unidas con "、"; si no hay ninguna, "暂无答案".
    """
    if question.answer:
        return question.answer
    correct = [option.opt_label for option in (question.options or []) if option.is_correct]
    if correct:
        return "、".join(correct)
    return NO_ANSWER


def count_items(questions: Sequence, materials: Sequence) -> int:
    return len(questions) + sum(len(material.questions or []) for material in materials)


def _title_block(text: str) -> Block:
    return Block(kind="title", runs=[TextRun(text=text)], align="center", spacing_after=400)


def _centered(text: str, spacing_before: int = 0, spacing_after: int = 0) -> Block:
    return Block(
        runs=[TextRun(text=text)],
        align="center",
        spacing_before=spacing_before,
        spacing_after=spacing_after,
    )


def _rich(text: Optional[str], spacing_after: int = 200) -> Block:
    return Block(runs=[TextRun(text=text or "", rich=True)], spacing_after=spacing_after)


def _item_header(number: str, label: str, label_color: str, score: int, sub: bool = False) -> Block:
    label_size = SIZE_SUB_HEADER if sub else SIZE_HEADER
    return Block(
        runs=[
            TextRun(text=f"{number} ", bold=True, size=SIZE_HEADER if sub else SIZE_NUMBER),
            TextRun(text=f"[{label}] ", bold=True, color=label_color, size=label_size),
            TextRun(text=f"({score}分)", size=label_size),
        ],
        spacing_before=200,
        spacing_after=200,
    )


def _option_block(option, show_correct: bool) -> Block:
    if not show_correct:
        runs = [
            TextRun(text=f"{option.opt_label}. ", bold=True),
            TextRun(text=option.opt_content or "", rich=True),
        ]
    else:
        color = COLOR_CORRECT if option.is_correct else COLOR_DEFAULT
        runs = [
            TextRun(text=f"{option.opt_label}. ", bold=True, color=color),
            TextRun(text=option.opt_content or "", bold=bool(option.is_correct), color=color, rich=True),
        ]
        if option.is_correct:
            runs.append(TextRun(text=" ✓ 正确答案", bold=True, color=COLOR_CORRECT))
    return Block(runs=runs, spacing_after=100)


def _question_body(question, show_answers: bool) -> List[Block]:
    blocks = [_rich(question.stem)]
    blocks.extend(_option_block(option, show_answers) for option in (question.options or []))

    if not show_answers:
        blocks.append(Block(runs=[TextRun(text="答案：", bold=True)], spacing_before=200, spacing_after=200))
        blocks.append(Block(runs=[TextRun(text=ANSWER_LINE, color=COLOR_ANSWER_LINE)], spacing_after=400))
        return blocks

    blocks.append(Block(
        runs=[
            TextRun(text="答案：", bold=True, color=COLOR_CORRECT),
            TextRun(text=resolve_answer(question), bold=True, color=COLOR_CORRECT, rich=True),
        ],
        spacing_before=200,
        spacing_after=200,
    ))
    if question.explanation:
        blocks.append(Block(
            runs=[TextRun(text="解析：", bold=True, color=COLOR_TYPE)],
            spacing_before=200,
            spacing_after=200,
        ))
        blocks.append(_rich(question.explanation, spacing_after=400))
    return blocks


def _items(questions: Sequence, materials: Sequence, score_per_item: int, show_answers: bool) -> List[Block]:
    blocks: List[Block] = []

    for index, question in enumerate(questions):
        blocks.append(_item_header(f"{index + 1}.", question.type_name or "", COLOR_TYPE, score_per_item))
        blocks.extend(_question_body(question, show_answers))

    for index, material in enumerate(materials):
        sub_questions = material.questions or []
        number = len(questions) + index + 1
        blocks.append(_item_header(
            f"{number}.", MATERIAL_LABEL, COLOR_MATERIAL, len(sub_questions) * score_per_item
        ))
        blocks.append(Block(
            runs=[TextRun(text=material.title or MATERIAL_LABEL, bold=True, size=SIZE_SUB_HEADER)],
            spacing_after=200,
        ))
        blocks.append(_rich(material.content))

        for sub_index, question in enumerate(sub_questions):
            blocks.append(_item_header(
                f"({sub_index + 1})", question.type_name or "", COLOR_TYPE, score_per_item, sub=True
            ))
            blocks.extend(_question_body(question, show_answers))

    return blocks


def compile_paper(
    questions: Sequence,
    materials: Sequence,
    title: str,
    subtitle: str = "",
    score_per_item: int = 10,
    duration_minutes: int = 120,
) -> PaperDocument:
    """
    Compila el examen y su hoja de respuestas.

    Args:
        questions: Preguntas independientes, en el orden en que se numeran
        materials: Materiales (con sus sub-preguntas), numerados después de las preguntas
        title: Título del examen
        subtitle: Subtítulo opcional
        score_per_item: Puntos por pregunta o sub-pregunta
        duration_minutes: Duración mostrada en la cabecera

    Returns:
        PaperDocument con las secciones "paper" y "answer_key"
    """
    total_score = count_items(questions, materials) * score_per_item

    paper_blocks = [_title_block(title)]
    if subtitle:
        paper_blocks.append(_centered(subtitle, spacing_after=400))
    paper_blocks.append(Block(
        runs=[
            TextRun(text="姓名：_______________", size=SIZE_HEADER),
            TextRun(text=" 班级：_______________", size=SIZE_HEADER),
            TextRun(text=" 学号：_______________", size=SIZE_HEADER),
        ],
        align="center",
        spacing_after=200,
    ))
    paper_blocks.append(Block(
        runs=[
            TextRun(text=f"考试时间：{duration_minutes}分钟", size=SIZE_HEADER),
            TextRun(text=f" 总分：{total_score}分", size=SIZE_HEADER),
        ],
        align="center",
        spacing_after=600,
    ))
    paper_blocks.extend(_items(questions, materials, score_per_item, show_answers=False))
    paper_blocks.append(_centered(END_OF_PAPER, spacing_before=600))

    answer_blocks = [_title_block(f"{title} - 答案与解析")]
    answer_blocks.extend(_items(questions, materials, score_per_item, show_answers=True))
    answer_blocks.append(_centered(END_OF_ANSWERS, spacing_before=600))

    logger.info(
        f"Paper compiled: questions={len(questions)} materials={len(materials)} total_score={total_score}"
    )

    return PaperDocument(
        title=title,
        subtitle=subtitle,
        total_score=total_score,
        sections=[
            PaperSection(name="paper", blocks=paper_blocks),
            PaperSection(name="answer_key", blocks=answer_blocks),
        ],
    )
