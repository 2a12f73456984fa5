"""Configuration management."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


ENV_PATH = Path(__file__).parent.parent / ".env"


class Settings(BaseModel):
    """Application settings.

    Built explicitly and handed to the provider adapters, so tests and
    embedding callers can run with their own values.
    """
    
    # Routing provider (GraphHopper)
    graphhopper_api_key: str | None = Field(
        default_factory=lambda: os.getenv("GRAPHHOPPER_API_KEY")
    )
    graphhopper_url: str = Field(
        default_factory=lambda: os.getenv("GRAPHHOPPER_URL", "https://graphhopper.com/api/1")
    )
    routing_vehicle: str = Field(
        default_factory=lambda: os.getenv("ROUTING_VEHICLE", "bike")
    )
    
    # POI provider (Overpass)
    overpass_url: str = Field(
        default_factory=lambda: os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
    )
    
    # Every external call is bounded by this timeout
    request_timeout_s: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT_S", "30")),
        gt=0,
    )
    
    # Route synthesis settings
    variant_count: int = Field(default=2, ge=1, le=5)
    seed_step: int = 12345
    
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )
    
    # Output settings
    output_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "output"
    )
    
    def validate_required(self) -> list[str]:
        """Check for missing required configuration."""
        missing = []
        
        if not self.graphhopper_api_key:
            missing.append("GRAPHHOPPER_API_KEY")
        
        # Overpass is public and keyless
        
        return missing


def load_settings(env_file: Path | None = ENV_PATH, **overrides) -> Settings:
    """Load settings from the environment, reading a .env file first if present."""
    if env_file is not None:
        load_dotenv(env_file)
    return Settings(**overrides)
