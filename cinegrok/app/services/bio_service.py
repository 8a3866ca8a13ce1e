"""Filmmaker bio generation (LLM with deterministic template fallback) and style embeddings."""
import json
import re

from openai import OpenAI

from cinegrok.app.core.config import settings
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.schemas.profile import ProfileData

logger = get_logger("services.bio")

BIO_PROMPT = """You are a professional film industry publicist.
Based on the following data from a filmmaker's portfolio submission, write a professional,
concise, 3-paragraph bio. Focus on their role, style, key works, and philosophy.
Use ONLY facts from the data. Output ONLY the bio text.

Profile data:
{profile_json}
"""


def _format_list(items: list[str], max_items: int = 3) -> str:
    items = [item for item in items if item][:max_items]
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def _article(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" and word else "a"


def _years_number(years_active: str) -> int:
    match = re.search(r"\d+", years_active or "")
    return int(match.group()) if match else 0


def _tier(years: int) -> str:
    if years >= 10:
        return "senior"
    if years >= 4:
        return "mid"
    return "junior"


def template_bio(profile: ProfileData) -> str:
    """Wikipedia-style opening paragraph built only from the profile's own fields."""
    name = profile.stageName or "This filmmaker"
    surname = name.split()[-1] if name.split() else name
    role_text = _format_list(profile.primaryRoles) or "filmmaker"
    location = (
        profile.currentLocation
        or ", ".join(p for p in (profile.currentCity, profile.currentState) if p)
        or profile.country
    )
    origin = ", ".join(p for p in (profile.nativeCity, profile.nativeState) if p)
    genres = _format_list(profile.preferredGenres, 2)
    years = _years_number(profile.yearsActive)
    tier = _tier(years)
    films = [film for film in profile.filmography if film.title]

    bio = f"{name} is {_article(role_text)} {role_text}"
    if location:
        bio += f" based in {location}"
    if origin and origin != location:
        bio += f", originally from {origin}"
    bio += "."

    if tier == "senior" and genres:
        bio += f" With over {years} years in the industry, {surname}'s work spans {genres}."
    elif tier == "mid" and genres:
        bio += f" Over {years} years, {surname} has built a body of work in {genres}."
    elif genres:
        bio += f" {surname} is drawn to {genres}."

    if profile.visualStyle:
        bio += f" {surname}'s filmmaking is characterized by {profile.visualStyle.rstrip('.').lower()}."
    if films:
        film_list = ", ".join(f"{f.title} ({f.year})" if f.year else f.title for f in films[:3])
        label = "Notable works include" if tier == "senior" else "Projects include"
        bio += f" {label} {film_list}."
    if profile.awards:
        bio += f" {surname} has received {profile.awards.rstrip('.')}."
    if profile.creativePhilosophy:
        bio += f" {profile.creativePhilosophy.strip()}"
    return bio.strip()


def _profile_json(profile: ProfileData) -> str:
    data = profile.model_dump(
        mode="json",
        exclude={"email", "phone", "dateOfBirth", "legalName", "aiBio", "isComplete", "lastUpdated"},
    )
    compact = {key: value for key, value in data.items() if value}
    return json.dumps(compact, indent=2)[:6000]


def generate_bio(profile: ProfileData) -> tuple[str, str]:
    """Returns (bio, source) where source is "openai" or "template"."""
    if settings.openai_api_key:
        try:
            client = OpenAI(api_key=settings.openai_api_key)
            resp = client.chat.completions.create(
                model=settings.openai_model or "gpt-4o-mini",
                messages=[{"role": "user", "content": BIO_PROMPT.format(profile_json=_profile_json(profile))}],
                temperature=0.6,
                max_tokens=600,
            )
            content = (resp.choices[0].message.content or "").strip()
            if content and len(content) > 50:
                return content[:3000], "openai"
        except Exception as e:
            logger.warning("Bio generation failed, using template: %s", e)
    return template_bio(profile), "template"


def embed_text(text: str) -> list[float] | None:
    """Embedding vector for text, or None when OpenAI is not configured or fails."""
    if not settings.openai_api_key or not (text or "").strip():
        return None
    try:
        client = OpenAI(api_key=settings.openai_api_key)
        resp = client.embeddings.create(model=settings.openai_embedding_model, input=text[:8000])
        return list(resp.data[0].embedding)
    except Exception as e:
        logger.warning("Embedding failed: %s", e)
        return None
