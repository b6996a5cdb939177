"""
Print-ready plan documents.

A PlanDocument is the layout-free content of what ends up in the PDF:
a title, a header block about the client, and ordered sections of lines.
Builders produce one; the PDF exporter rasterizes it.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DocumentSection:
    heading: str
    lines: list[str] = field(default_factory=list)
    subheading: Optional[str] = None


@dataclass
class PlanDocument:
    title: str
    subtitle: str = ""
    details: list[str] = field(default_factory=list)
    byline: str = ""
    sections: list[DocumentSection] = field(default_factory=list)
    empty_message: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def text_lines(self) -> list[str]:
        """Flatten to plain lines, in reading order. Handy for previews."""
        lines = [self.title]
        if self.subtitle:
            lines.append(self.subtitle)
        if self.details:
            lines.append(" | ".join(self.details))
        if self.byline:
            lines.append(self.byline)
        if self.is_empty and self.empty_message:
            lines.append(self.empty_message)
        for section in self.sections:
            lines.append(section.heading)
            if section.subheading:
                lines.append(section.subheading)
            lines.extend(section.lines)
        return lines


def client_detail_parts(gender: str, age: str, height: str, weight: str) -> list[str]:
    """The "Gender: x | Age: y | ..." header, skipping blanks."""
    parts = []
    if gender:
        parts.append(f"Gender: {gender}")
    if age:
        parts.append(f"Age: {age}")
    if height:
        parts.append(f"Height: {height} cm")
    if weight:
        parts.append(f"Weight: {weight} kg")
    return parts


def pdf_filename(client_name: str, suffix: str = "", fallback: str = "workout") -> str:
    """Filename derived from the client's name, whitespace runs become dashes."""
    stem = re.sub(r"\s+", "-", client_name.strip()) or fallback
    # path separators would escape the output directory
    stem = stem.replace("/", "-").replace("\\", "-")
    if suffix:
        stem = f"{stem}-{suffix}"
    return f"{stem}.pdf"
