"""
Configuration management for the Flow export backend
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings"""

    # Project paths
    BASE_DIR = Path(__file__).parent.parent.parent

    def __init__(self):
        # Branding used in headers, footers and the deck badge
        self.FLOW_BRAND = os.getenv("FLOW_BRAND", "FLOW")

        # Where non-HTTP exports are delivered
        self.EXPORT_DIR = Path(os.getenv("EXPORT_DIR", str(self.BASE_DIR / "exports")))

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Allow React dev server by default
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
            if origin.strip()
        ]

        # Hosted backend (scheduled export metadata)
        self.SUPABASE_URL = os.getenv("SUPABASE_URL", "")
        self.SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
        self.SUPABASE_TIMEOUT = float(os.getenv("SUPABASE_TIMEOUT", "10"))

    @property
    def use_hosted_backend(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


settings = Settings()
