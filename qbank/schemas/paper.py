from typing import List, Literal, Optional
from pydantic import BaseModel


class PaperRequest(BaseModel):
    """
    Selección de preguntas y materiales para compilar un examen.
    Los ids se respetan en el orden recibido.
    """
    question_ids: List[int] = []
    material_ids: List[int] = []
    title: Optional[str] = None
    subtitle: str = ""


# --- Document model ---

class TextRun(BaseModel):
    text: str
    bold: bool = False
    color: Optional[str] = None     # hex RGB, e.g. "00AA00"
    size: Optional[int] = None      # half-points
    rich: bool = False              # may carry LaTeX markup


class Block(BaseModel):
    kind: Literal["title", "paragraph"] = "paragraph"
    runs: List[TextRun] = []
    align: Literal["left", "center"] = "left"
    spacing_before: int = 0         # twips
    spacing_after: int = 0          # twips

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


class PaperSection(BaseModel):
    name: Literal["paper", "answer_key"]
    blocks: List[Block] = []


class PaperDocument(BaseModel):
    title: str
    subtitle: str = ""
    total_score: int
    sections: List[PaperSection]
