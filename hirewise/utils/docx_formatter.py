"""
DOCX formatting helpers.
Builds styled paragraphs and runs: font sizes, colors, bold, italic, alignment,
spacing, indentation and heading borders.
"""

from typing import Any, Dict, Iterable, Optional, Tuple

from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor, Twips
from docx.text.paragraph import Paragraph

# (text, run format) pairs; run format keys: bold, italic, size (pt), color (hex)
RunSpec = Tuple[str, Dict[str, Any]]


class DocxFormatter:
    """Stateless helpers for building styled DOCX content."""

    @staticmethod
    def set_document_font(doc: DocumentObject, font_name: str, size_pt: float):
        """Set the Normal style font used by every run without an override."""
        normal = doc.styles['Normal']
        normal.font.name = font_name
        normal.font.size = Pt(size_pt)

    @staticmethod
    def apply_run_format(run, run_format: Dict[str, Any]):
        """
        Apply formatting to a run.

        Args:
            run: Target run
            run_format: Dict with optional bold, italic, size and color keys
        """
        if run_format.get('bold') is not None:
            run.font.bold = run_format['bold']
        if run_format.get('italic') is not None:
            run.font.italic = run_format['italic']
        if run_format.get('size'):
            run.font.size = Pt(run_format['size'])
        if run_format.get('color'):
            run.font.color.rgb = RGBColor.from_string(run_format['color'].upper())

    @staticmethod
    def apply_paragraph_format(
        paragraph: Paragraph,
        alignment: Optional[WD_ALIGN_PARAGRAPH] = None,
        space_before: Optional[int] = None,
        space_after: Optional[int] = None,
        left_indent: Optional[int] = None,
    ):
        """
        Apply paragraph-level formatting. Spacing and indent are in twips.
        """
        fmt = paragraph.paragraph_format
        if alignment is not None:
            paragraph.alignment = alignment
        if space_before is not None:
            fmt.space_before = Twips(space_before)
        if space_after is not None:
            fmt.space_after = Twips(space_after)
        if left_indent is not None:
            fmt.left_indent = Twips(left_indent)

    @staticmethod
    def add_bottom_border(paragraph: Paragraph, color: str, size: int = 6, space: int = 1):
        """
        Draw a single line under the paragraph.

        Must run before spacing/alignment are set so that ``w:pBdr`` lands
        ahead of ``w:spacing`` and ``w:jc`` inside ``w:pPr``.
        """
        p_pr = paragraph._p.get_or_add_pPr()
        borders = OxmlElement('w:pBdr')
        bottom = OxmlElement('w:bottom')
        bottom.set(qn('w:val'), 'single')
        bottom.set(qn('w:sz'), str(size))
        bottom.set(qn('w:space'), str(space))
        bottom.set(qn('w:color'), color.upper())
        borders.append(bottom)
        p_pr.append(borders)

    @staticmethod
    def add_styled_paragraph(
        doc: DocumentObject,
        runs: Iterable[RunSpec],
        style: Optional[str] = None,
        border_color: Optional[str] = None,
        **paragraph_format,
    ) -> Paragraph:
        """
        Append a paragraph built from styled runs.

        Args:
            doc: Target document
            runs: (text, run format) pairs, in order
            style: Optional paragraph style name (e.g. 'Heading 2')
            border_color: Draw a bottom border in this color
            **paragraph_format: Passed to apply_paragraph_format

        Returns:
            The new paragraph
        """
        paragraph = doc.add_paragraph(style=style)
        if border_color:
            DocxFormatter.add_bottom_border(paragraph, border_color)
        for text, run_format in runs:
            run = paragraph.add_run(text)
            DocxFormatter.apply_run_format(run, run_format)
        DocxFormatter.apply_paragraph_format(paragraph, **paragraph_format)
        return paragraph

    @staticmethod
    def add_blank_line(doc: DocumentObject, space_after: Optional[int] = None) -> Paragraph:
        paragraph = doc.add_paragraph('')
        DocxFormatter.apply_paragraph_format(paragraph, space_after=space_after)
        return paragraph
