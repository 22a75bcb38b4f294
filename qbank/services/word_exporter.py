# qbank/services/word_exporter.py
"""
Exportación de exámenes compilados a Word (.docx) con python-docx.
"""
import io
import logging
import re
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor, Twips

from qbank.schemas.paper import Block, PaperDocument, TextRun

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Los delimitadores de bloque van antes que los de línea: "$$x$$" no debe leerse como "$" + "$x$" + "$"
_LATEX_DELIMITERS = (
    re.compile(r"\$\$([\s\S]*?)\$\$"),
    re.compile(r"\\\[([\s\S]*?)\\\]"),
    re.compile(r"\\\(([\s\S]*?)\\\)"),
    re.compile(r"\$([^$]+)\$"),
)
_LATEX_COMMAND = re.compile(r"\\[a-zA-Z]+")
_BRACES = re.compile(r"[{}]")


def strip_latex(text: Optional[str]) -> str:
    """
    Convierte texto con LaTeX en texto plano (con pérdida).

    Quita los delimitadores de fórmulas, los nombres de comandos, las llaves
    y las barras invertidas restantes.
    """
    if not text:
        return ""
    for pattern in _LATEX_DELIMITERS:
        text = pattern.sub(r"\1", text)
    text = _LATEX_COMMAND.sub("", text)
    text = _BRACES.sub("", text)
    return text.replace("\\", "").strip()


def _add_run(paragraph, run: TextRun) -> None:
    text = strip_latex(run.text) if run.rich else run.text
    docx_run = paragraph.add_run(text)
    if run.bold:
        docx_run.bold = True
    if run.color:
        docx_run.font.color.rgb = RGBColor.from_string(run.color)
    if run.size:
        docx_run.font.size = Pt(run.size / 2)


def _add_block(document, block: Block) -> None:
    if block.kind == "title":
        paragraph = document.add_heading("", level=0)
    else:
        paragraph = document.add_paragraph()

    for run in block.runs:
        _add_run(paragraph, run)

    if block.align == "center":
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    if block.spacing_before:
        paragraph.paragraph_format.space_before = Twips(block.spacing_before)
    if block.spacing_after:
        paragraph.paragraph_format.space_after = Twips(block.spacing_after)


def export_paper_to_docx(paper: PaperDocument) -> bytes:
    """
    Genera el documento Word de un examen compilado.

    Cada bloque se escribe como un párrafo; la hoja de respuestas empieza en
    una página nueva.

    Returns:
        Contenido del .docx en bytes
    """
    document = Document()
    document.core_properties.title = paper.title

    for section in paper.sections:
        if section.name == "answer_key":
            document.add_page_break()
        for block in section.blocks:
            _add_block(document, block)

    buffer = io.BytesIO()
    document.save(buffer)
    content = buffer.getvalue()

    logger.info(f"Paper exported to DOCX: title={paper.title!r} size={len(content)} bytes")
    return content
