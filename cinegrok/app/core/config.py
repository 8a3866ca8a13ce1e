"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All backend-related configs and constants are centralized here.
"""
import re
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: project root .env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# Load .env into environment BEFORE pydantic reads. override=True ensures .env
# values override any shell env.
# When .env doesn't exist (prod), this is a no-op; platform env vars are used.
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "CineGrok"
    app_version: str = "1.0.0"
    port: int = 8001

    # Database
    database_url: str = "sqlite:///./cinegrok.db"

    # Auth
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    auth_cookie_name: str = "cinegrok_token"

    # Redis
    redis_url: str = ""

    # Cache TTLs (seconds)
    filmmaker_list_cache_ttl: int = 300
    filmmaker_profile_cache_ttl: int = 3600
    analytics_stats_cache_ttl: int = 120

    # Browse defaults
    browse_default_limit: int = 12
    browse_max_limit: int = 100

    # Producer view gate: "prompt" (inline login prompt) or "noop" (silently stay in audience view)
    producer_gate_policy: str = "prompt"

    # Client session poll (seconds)
    session_poll_interval: int = 30

    # Legacy bulk ingestion shared secret (empty = open endpoint)
    ingest_api_key: str = ""

    # Analytics rate limit per IP
    analytics_rate_limit_requests: int = 100
    analytics_rate_limit_window: int = 60

    # HTTP / network
    http_request_timeout: int = 30

    # AWS S3
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-south-1"
    aws_bucket_name: str = "cinegrok-media"
    s3_key_prefix: str = "uploads"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


# --- Constants (non-env, business config) ---

# Wizard
WIZARD_STEPS: tuple[str, ...] = (
    "Personal",
    "Professional",
    "Filmography",
    "Social",
    "Education",
    "Preview",
)
FIRST_STEP: int = 1
LAST_STEP: int = len(WIZARD_STEPS)
# More populated top-level fields than this triggers the leave confirmation
UNSAVED_FIELDS_THRESHOLD: int = 5
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Shown wherever a profile has no location at all
LOCATION_PLACEHOLDER: str = "Location"

# Roles
MAX_PRIMARY_ROLES: int = 2
MAX_SECONDARY_ROLES: int = 2
MAX_TOTAL_ROLES: int = 4

STANDARD_ROLES: list[str] = [
    "Director",
    "Cinematographer",
    "Editor",
    "Writer",
    "Producer",
    "Actor",
    "Sound Designer",
    "Production Designer",
    "Music Director",
    "VFX Artist",
]

GENRES: list[str] = [
    "Drama",
    "Comedy",
    "Thriller",
    "Horror",
    "Documentary",
    "Experimental",
    "Animation",
    "Sci-Fi",
    "Romance",
    "Action",
]

FILM_FORMATS: list[str] = [
    "Feature Film",
    "Short Film",
    "Documentary",
    "Web Series",
    "Commercial",
    "Music Video",
    "TV Series",
    "Experimental",
]

PRODUCTION_STATUSES: list[str] = [
    "Released",
    "Completed",
    "Festival Run",
    "Post-Production",
    "Production",
    "Pre-Production",
    "Development",
]

CREW_SCALES: list[str] = ["Solo", "Small (2-5)", "Medium (6-20)", "Large (20+)"]

# Legacy ingestion used different bucket labels for the same ordinal scale
LEGACY_CREW_SCALES: dict[str, str] = {
    "solo": "Solo",
    "2-5": "Small (2-5)",
    "6-15": "Medium (6-20)",
    "6-20": "Medium (6-20)",
    "15+": "Large (20+)",
    "20+": "Large (20+)",
}

COLLABORATION_OPTIONS: list[str] = ["Yes", "No", "Selective"]
AVAILABILITY_OPTIONS: list[str] = ["Available", "Busy", "Selective", "Part-time"]

# Achievements: type -> the result it implies
ACHIEVEMENT_RESULTS: dict[str, str] = {
    "award": "won",
    "nomination": "nominated",
    "official_selection": "selected",
    "screening": "screened",
}
EVENT_CATEGORIES: list[str] = ["festival", "competition", "ceremony", "other"]
AWARD_CATEGORIES: list[str] = [
    "Best Director",
    "Best Film",
    "Best Screenplay",
    "Best Cinematography",
    "Best Actor",
    "Best Actress",
    "Best Supporting Actor",
    "Best Supporting Actress",
    "Best Documentary",
    "Best Short Film",
    "Best Animation",
    "Best Debut Feature",
    "Jury Prize",
    "Grand Jury Prize",
    "Audience Award",
    "Special Mention",
    "Golden Bear",
    "Golden Lion",
    "Palme d'Or",
    "Custom",
]

SOCIAL_LINK_KEYS: list[str] = [
    "instagram",
    "youtube",
    "imdb",
    "linkedin",
    "twitter",
    "facebook",
    "website",
    "letterboxd",
]
EDUCATION_KEYS: list[str] = [
    "schooling",
    "higherSecondary",
    "undergraduate",
    "postgraduate",
    "phd",
    "certifications",
]

# Display-only accents keyed by primary role
ROLE_COLORS: dict[str, str] = {
    "Director": "#18181b",
    "Cinematographer": "#27272a",
    "Editor": "#3f3f46",
    "Writer": "#52525b",
    "Producer": "#18181b",
    "Actor": "#3f3f46",
    "Production Designer": "#52525b",
    "Sound Designer": "#3f3f46",
    "Music Director": "#27272a",
    "VFX Artist": "#3f3f46",
}
DEFAULT_ROLE_COLOR: str = "#52525b"

# Collaboration interest statuses
INTEREST_STATUSES: tuple[str, ...] = ("interested", "shortlisted", "contacted", "archived")

# Analytics
CLICK_TYPES: tuple[str, ...] = ("film", "watch", "trailer", "social")
BOT_USER_AGENT_PATTERN = re.compile(
    r"googlebot|bingbot|slurp|duckduckbot|baiduspider|yandex|facebookexternalhit|"
    r"twitterbot|linkedinbot|applebot|semrushbot|dotbot|ahrefsbot|mj12bot|bytespider|"
    r"gptbot|ccbot|anthropic-ai",
    re.IGNORECASE,
)

# Export (PDF)
PDF_LINE_HEIGHT: int = 14
PDF_FONT_SIZE_TITLE: int = 16
PDF_FONT_SIZE_HEADING: int = 12
PDF_FONT_SIZE_BODY: int = 10
PDF_MAX_LINE_CHARS: int = 110
