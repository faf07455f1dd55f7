"""
DOCX generation for resumes and cover letters.

The builders assume validated input and fill gaps with the placeholder
constants below instead of raising. Serialization errors from python-docx
propagate to the caller.
"""

from datetime import date
from io import BytesIO
from typing import Dict, List, Optional

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH

from hirewise.models import (
    CandidateProfile,
    CoverLetterContent,
    DocumentType,
    Education,
    ExportRequest,
    Experience,
    GeneratedDocument,
    PersonalInfo,
    SkillLevel,
)
from hirewise.utils.docx_formatter import DocxFormatter
from hirewise.utils.file_utils import safe_stem

# Placeholders
DEFAULT_NAME = "Your Name"
DEFAULT_HIRING_MANAGER = "Hiring Manager"
DEFAULT_POSITION = "Position"
DEFAULT_COMPANY = "Company"
DEFAULT_DEGREE = "Degree"
DEFAULT_FIELD = "Field"
DEFAULT_SCHOOL = "School/University"
DEFAULT_GRADUATION_DATE = "Graduation Date"
DEFAULT_SKILL_LEVEL = SkillLevel.INTERMEDIATE
PRESENT_LABEL = "Present"
DEFAULT_FILENAME_STEM = "document"

# Section headings
SUMMARY_HEADING = "PROFESSIONAL SUMMARY"
EXPERIENCE_HEADING = "WORK EXPERIENCE"
EDUCATION_HEADING = "EDUCATION"
SKILLS_HEADING = "SKILLS"

BULLET = "•"
CONTACT_SEPARATOR = " • "
DATE_RANGE_SEPARATOR = " – "

# Styling (sizes in points, spacing in twips, colors in hex)
FONT_NAME = "Calibri"
FONT_SIZE = 11
ACCENT_COLOR = "2563eb"
HEADING_COLOR = "1f2937"
BODY_COLOR = "374151"
MUTED_COLOR = "6b7280"
INDENT = 360

NAME_STYLE = {'bold': True, 'size': 16, 'color': ACCENT_COLOR}
CONTACT_STYLE = {'size': 10, 'color': MUTED_COLOR}
HEADING_STYLE = {'bold': True, 'size': 12, 'color': HEADING_COLOR}
ENTRY_TITLE_STYLE = {'bold': True, 'size': 11, 'color': HEADING_COLOR}
ENTRY_SUBTITLE_STYLE = {'size': 11, 'color': BODY_COLOR}
DATE_STYLE = {'italic': True, 'size': 10, 'color': MUTED_COLOR}
BODY_STYLE = {'size': 10, 'color': BODY_COLOR}
SUMMARY_STYLE = {'size': 11, 'color': BODY_COLOR}
LABEL_STYLE = {'bold': True, 'size': 10, 'color': HEADING_COLOR}
LETTER_NAME_STYLE = {'bold': True, 'size': 12}
LETTER_STYLE = {'size': 10}


def _new_document() -> DocumentObject:
    doc = Document()
    DocxFormatter.set_document_font(doc, FONT_NAME, FONT_SIZE)
    return doc


def _add_section_heading(doc: DocumentObject, title: str):
    DocxFormatter.add_styled_paragraph(
        doc,
        [(title, HEADING_STYLE)],
        style='Heading 2',
        border_color=ACCENT_COLOR,
        space_before=300,
        space_after=200,
    )


def contact_line(info: PersonalInfo) -> str:
    """Present contact fields joined by the separator ('' when none)."""
    fields = [info.email, info.phone, info.location, info.website]
    return CONTACT_SEPARATOR.join(f for f in fields if f)


def date_range(start: Optional[str], end: Optional[str], current: bool = False) -> str:
    """'Jan 2020 – Present' style range."""
    finish = PRESENT_LABEL if current or not end else end
    return f"{start or ''}{DATE_RANGE_SEPARATOR}{finish}"


def bullet_lines(description: Optional[str]) -> List[str]:
    """Split a description into bullet lines, skipping blank ones."""
    lines = []
    for line in (description or "").split("\n"):
        if not line.strip():
            continue
        lines.append(line if line.startswith(BULLET) else f"{BULLET} {line}")
    return lines


def group_skills_by_level(profile: CandidateProfile) -> Dict[str, List[str]]:
    """Skill names per level, levels in order of first appearance."""
    groups: Dict[str, List[str]] = {}
    for skill in profile.skills:
        level = (skill.level or DEFAULT_SKILL_LEVEL).value
        groups.setdefault(level, []).append(skill.name)
    return groups


def _add_experience(doc: DocumentObject, exp: Experience):
    DocxFormatter.add_styled_paragraph(
        doc,
        [
            (exp.position or DEFAULT_POSITION, ENTRY_TITLE_STYLE),
            (f"{CONTACT_SEPARATOR}{exp.company or DEFAULT_COMPANY}", ENTRY_SUBTITLE_STYLE),
        ],
        space_before=200,
        space_after=100,
    )
    DocxFormatter.add_styled_paragraph(
        doc,
        [(date_range(exp.start_date, exp.end_date, exp.current), DATE_STYLE)],
        space_after=150,
    )
    for line in bullet_lines(exp.description):
        DocxFormatter.add_styled_paragraph(
            doc, [(line, BODY_STYLE)], space_after=100, left_indent=INDENT
        )
    DocxFormatter.add_blank_line(doc, space_after=200)


def _add_education(doc: DocumentObject, edu: Education):
    DocxFormatter.add_styled_paragraph(
        doc,
        [(f"{edu.degree or DEFAULT_DEGREE} in {edu.field or DEFAULT_FIELD}", ENTRY_TITLE_STYLE)],
        space_before=200,
        space_after=100,
    )
    runs = [
        (edu.school or DEFAULT_SCHOOL, BODY_STYLE),
        (f"{CONTACT_SEPARATOR}{edu.graduation_date or DEFAULT_GRADUATION_DATE}", DATE_STYLE),
    ]
    if edu.gpa:
        runs.append((f"{CONTACT_SEPARATOR}GPA: {edu.gpa}", DATE_STYLE))
    DocxFormatter.add_styled_paragraph(doc, runs, space_after=100 if edu.description else 200)
    if edu.description:
        DocxFormatter.add_styled_paragraph(
            doc,
            [(edu.description, BODY_STYLE)],
            space_after=200,
            left_indent=INDENT,
            alignment=WD_ALIGN_PARAGRAPH.JUSTIFY,
        )


def build_resume_document(profile: CandidateProfile) -> DocumentObject:
    """
    Lay out a resume.

    Order: name and contact line, then the summary, experience, education
    and skills sections, each only when it has content.
    """
    doc = _new_document()
    info = profile.personal_info

    DocxFormatter.add_styled_paragraph(
        doc,
        [(info.full_name or DEFAULT_NAME, NAME_STYLE)],
        alignment=WD_ALIGN_PARAGRAPH.CENTER,
        space_after=200,
    )
    contact = contact_line(info)
    if contact:
        DocxFormatter.add_styled_paragraph(
            doc,
            [(contact, CONTACT_STYLE)],
            alignment=WD_ALIGN_PARAGRAPH.CENTER,
            space_after=300,
        )

    if info.summary:
        _add_section_heading(doc, SUMMARY_HEADING)
        DocxFormatter.add_styled_paragraph(
            doc,
            [(info.summary, SUMMARY_STYLE)],
            space_after=300,
            alignment=WD_ALIGN_PARAGRAPH.JUSTIFY,
        )

    if profile.experiences:
        _add_section_heading(doc, EXPERIENCE_HEADING)
        for exp in profile.experiences:
            _add_experience(doc, exp)

    if profile.education:
        _add_section_heading(doc, EDUCATION_HEADING)
        for edu in profile.education:
            _add_education(doc, edu)

    if profile.skills or profile.skills_description:
        _add_section_heading(doc, SKILLS_HEADING)
        if profile.skills_description:
            DocxFormatter.add_styled_paragraph(
                doc,
                [(profile.skills_description, BODY_STYLE)],
                space_after=200 if profile.skills else 300,
                alignment=WD_ALIGN_PARAGRAPH.JUSTIFY,
            )
        for level, names in group_skills_by_level(profile).items():
            DocxFormatter.add_styled_paragraph(
                doc,
                [(f"{level}: ", LABEL_STYLE), (", ".join(names), BODY_STYLE)],
                space_after=150,
            )

    return doc


def format_letter_date(today: date) -> str:
    """en-US short date without zero padding, e.g. 3/7/2025."""
    return f"{today.month}/{today.day}/{today.year}"


def build_cover_letter_document(letter: CoverLetterContent, today: Optional[date] = None) -> DocumentObject:
    """
    Lay out a cover letter: sender block, date, optional addressee block,
    then the non-empty paragraphs in order.
    """
    doc = _new_document()
    info = letter.personal_info

    DocxFormatter.add_styled_paragraph(doc, [(info.full_name or DEFAULT_NAME, LETTER_NAME_STYLE)])
    for line in (info.email, info.phone, info.address):
        if line:
            DocxFormatter.add_styled_paragraph(doc, [(line, LETTER_STYLE)])
    DocxFormatter.add_blank_line(doc)

    DocxFormatter.add_styled_paragraph(doc, [(format_letter_date(today or date.today()), LETTER_STYLE)])
    DocxFormatter.add_blank_line(doc)

    job = letter.job_info
    if job.hiring_manager or job.company:
        DocxFormatter.add_styled_paragraph(doc, [(job.hiring_manager or DEFAULT_HIRING_MANAGER, LETTER_STYLE)])
        if job.company:
            DocxFormatter.add_styled_paragraph(doc, [(job.company, LETTER_STYLE)])
        DocxFormatter.add_blank_line(doc)

    for paragraph in letter.paragraphs():
        DocxFormatter.add_styled_paragraph(doc, [(paragraph, LETTER_STYLE)])
        DocxFormatter.add_blank_line(doc)

    return doc


def render_document(doc: DocumentObject) -> bytes:
    """Serialize a document to .docx bytes."""
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def document_filename(name: Optional[str], doc_type: str, default_stem: str = DEFAULT_FILENAME_STEM) -> str:
    """'Jane Doe', 'resume' -> 'Jane_Doe_resume.docx'."""
    return f"{safe_stem(name, default_stem)}_{doc_type}.docx"


def export_resume(profile: CandidateProfile, default_stem: str = "resume") -> GeneratedDocument:
    doc = build_resume_document(profile)
    return GeneratedDocument(
        filename=document_filename(profile.personal_info.full_name, DocumentType.RESUME.value, default_stem),
        content=render_document(doc),
    )


def export_cover_letter(letter: CoverLetterContent, today: Optional[date] = None) -> GeneratedDocument:
    doc = build_cover_letter_document(letter, today)
    return GeneratedDocument(
        filename=document_filename(letter.personal_info.full_name, DocumentType.COVER_LETTER.value),
        content=render_document(doc),
    )


def build_document(request: ExportRequest, today: Optional[date] = None) -> GeneratedDocument:
    """Dispatch a tagged export request to the matching builder."""
    if request.type == DocumentType.RESUME:
        return export_resume(request.resume(), default_stem=DEFAULT_FILENAME_STEM)
    return export_cover_letter(request.cover_letter(), today)


def extract_docx_text(data: bytes) -> str:
    """Paragraph text of a .docx, one paragraph per line, blanks dropped."""
    doc = Document(BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
