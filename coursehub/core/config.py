from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Late policy
GRACE_PERIOD_MINUTES = 10  # submissions within 10 mins after due are not late

# Submissions
MAX_UPLOAD_SIZE_MB = 100

# Catalog paging
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100

# Course limits
MIN_DURATION_HOURS = 1
MAX_DURATION_HOURS = 52
MIN_STUDENTS = 1
MAX_STUDENTS = 200
DEFAULT_CATEGORY = "Other"
COURSE_CATEGORIES = (
    "Biblical Studies",
    "Theology",
    "Church History",
    "Christian Education",
    "Ministry",
    "Music",
    "Youth Ministry",
    "Leadership",
    "Evangelism",
    "Pastoral Care",
    DEFAULT_CATEGORY,
)

# Placeholder credentials shipped in sample .env files
PLACEHOLDER_PROJECT_ID = "test-project"
PLACEHOLDER_KEY_MARKER = "TEST_KEY"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "CourseHub"
    environment: str = Field(
        default="production",
        description="Application environment (development, test, production)",
    )
    log_level: str = "INFO"
    database_url: str = "sqlite:///./coursehub.db"

    firebase_project_id: str | None = None
    firebase_private_key: str | None = None
    firebase_client_email: str | None = None
    firebase_app_name: str = "coursehub"

    # DEV ONLY: accepted as an admin credential when environment=development
    dev_token: str = "test-token"

    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @property
    def dev_mode(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def private_key(self) -> str | None:
        if self.firebase_private_key is None:
            return None
        # keys pasted into .env files carry literal "\n" sequences
        return self.firebase_private_key.replace("\\n", "\n")

    def missing_firebase_settings(self) -> list[str]:
        required = {
            "FIREBASE_PROJECT_ID": self.firebase_project_id,
            "FIREBASE_PRIVATE_KEY": self.firebase_private_key,
            "FIREBASE_CLIENT_EMAIL": self.firebase_client_email,
        }
        return [name for name, value in required.items() if not value]

    @property
    def firebase_placeholder(self) -> bool:
        return self.firebase_project_id == PLACEHOLDER_PROJECT_ID or (
            self.firebase_private_key is not None
            and PLACEHOLDER_KEY_MARKER in self.firebase_private_key
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
