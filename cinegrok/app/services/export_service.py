"""
Profile export - standalone HTML (Jinja2) and PDF (reportlab) built from the
normalized profile and its filmography statistics.
"""
import textwrap
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from cinegrok.app.core.config import (
    PDF_FONT_SIZE_BODY,
    PDF_FONT_SIZE_HEADING,
    PDF_FONT_SIZE_TITLE,
    PDF_LINE_HEIGHT,
    PDF_MAX_LINE_CHARS,
)
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.schemas.profile import ProfileData
from cinegrok.app.services.profile_renderer import build_producer_view
from cinegrok.app.utils.templates import render_template

logger = get_logger("services.export")

EXPORT_FORMATS = ("html", "pdf")


def export_filename(profile: ProfileData, extension: str) -> str:
    slug = "-".join((profile.stageName or "profile").lower().split()) or "profile"
    return f"{slug}-cinegrok.{extension}"


def export_html(profile: ProfileData, filmmaker_id: str) -> str:
    view = build_producer_view(profile, filmmaker_id)
    return render_template(
        "profile_export.html",
        view=view,
        profile=profile,
        generated_at=datetime.utcnow().strftime("%Y-%m-%d"),
    )


def _count_line(counts: dict[str, int]) -> str:
    return ", ".join(f"{name} ({count})" for name, count in counts.items())


def build_export_lines(profile: ProfileData, filmmaker_id: str) -> list[tuple[str, str]]:
    """(kind, text) lines where kind is "title", "heading" or "body"."""
    view = build_producer_view(profile, filmmaker_id)
    header = view["header"]
    lines: list[tuple[str, str]] = [("title", profile.stageName or "Filmmaker profile")]
    subtitle = " | ".join(p for p in (", ".join(header["primaryRoles"]), header["location"]) if p)
    if subtitle:
        lines.append(("body", subtitle))

    contact = [f"{label}: {value}" for label, value in (
        ("Email", profile.email),
        ("Phone", profile.phone),
        ("Preferred contact", profile.preferredContact),
        ("Languages", profile.languages),
    ) if value]
    if contact:
        lines.append(("heading", "Contact"))
        lines.extend(("body", line) for line in contact)

    if profile.aiBio:
        lines.append(("heading", "About"))
        lines.append(("body", profile.aiBio))

    if view["total_films"]:
        lines.append(("heading", "Filmography"))
        for row in view["activity"]:
            details = " | ".join(p for p in (row["format"], row["status"], row["primaryRole"], row["crewScale"]) if p)
            year = f"{row['year']}  " if row["year"] else ""
            lines.append(("body", f"{year}{row['title'] or 'Untitled'}" + (f"  ({details})" if details else "")))
        for label, key in (("By status", "status"), ("By format", "format"), ("By crew scale", "crew_scale")):
            series = view["charts"][key]
            if series:
                lines.append(("body", f"{label}: " + ", ".join(f"{s['name']} ({s['value']})" for s in series)))
        if view["role_counts"]:
            lines.append(("body", f"Roles: {_count_line(view['role_counts'])}"))
        if view["genre_counts"]:
            lines.append(("body", f"Genres: {_count_line(view['genre_counts'])}"))

    recognition = view["recognition"]
    if recognition["items"] or recognition["awards_text"]:
        lines.append(("heading", "Recognition"))
        lines.append(("body", (
            f"Wins {recognition['wins']}, nominations {recognition['nominations']}, "
            f"selections {recognition['selections']}, screenings {recognition['screenings']}"
        )))
        for item in recognition["items"]:
            event = " ".join(p for p in (item["eventName"], item["year"]) if p)
            category = f" - {item['category']}" if item["category"] else ""
            lines.append(("body", f"{item['filmTitle']}: {item['result']} at {event or 'event'}{category}"))
        if recognition["awards_text"]:
            lines.append(("body", recognition["awards_text"]))

    if view["education"]:
        lines.append(("heading", "Education"))
        lines.extend(("body", value) for value in view["education"].values())

    if view["social"]:
        lines.append(("heading", "Links"))
        lines.extend(("body", f"{link['platform']}: {link['url']}") for link in view["social"])
    return lines


_FONTS = {
    "title": ("Helvetica-Bold", PDF_FONT_SIZE_TITLE),
    "heading": ("Helvetica-Bold", PDF_FONT_SIZE_HEADING),
    "body": ("Helvetica", PDF_FONT_SIZE_BODY),
}


def export_pdf(profile: ProfileData, filmmaker_id: str) -> bytes:
    """Render the export lines onto letter pages. Returns PDF file content as bytes."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    c.setTitle(profile.stageName or "Filmmaker profile")
    width, height = letter
    margin = inch
    x, y = margin, height - margin

    for kind, text in build_export_lines(profile, filmmaker_id):
        font, size = _FONTS[kind]
        if kind == "heading":
            y -= PDF_LINE_HEIGHT * 0.5
        wrapped = textwrap.wrap(text, PDF_MAX_LINE_CHARS) or [""]
        for line in wrapped:
            if y < margin + PDF_LINE_HEIGHT:
                c.showPage()
                y = height - margin
            c.setFont(font, size)
            c.drawString(x, y, line)
            y -= PDF_LINE_HEIGHT * (1.5 if kind == "title" else 1)
    c.save()
    logger.info("Profile PDF exported filmmaker_id=%s", filmmaker_id)
    return buffer.getvalue()
