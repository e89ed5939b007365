from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_PACKAGE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = _PACKAGE_DIR / "data"
    jwt_secret: str = "dish-catalog-secret-change-in-production"
    token_ttl_seconds: int = 24 * 60 * 60
    bcrypt_rounds: int = 10
    full_listing_limit: int = 1000
    literal_search: bool = False
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def dishes_path(self) -> Path:
        return self.data_dir / "dishes.json"

    @property
    def users_path(self) -> Path:
        return self.data_dir / "users.json"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Settings:
        """Build settings from a ``.env`` file and the process environment."""
        load_dotenv(env_file or _PACKAGE_DIR.parent / ".env")
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            data_dir=Path(os.getenv("DISH_CATALOG_DATA_DIR", str(defaults.data_dir))),
            jwt_secret=os.getenv("JWT_SECRET", defaults.jwt_secret),
            token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", str(defaults.token_ttl_seconds))),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", str(defaults.bcrypt_rounds))),
            full_listing_limit=int(os.getenv("FULL_LISTING_LIMIT", str(defaults.full_listing_limit))),
            literal_search=_env_bool("LITERAL_SEARCH", defaults.literal_search),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else defaults.cors_origins
            ),
        )
