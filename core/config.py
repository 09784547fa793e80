from typing import Literal, Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file explicitly to ensure it works even if not in CWD
load_dotenv()

class Settings(BaseSettings):
    discord_token: str
    mongo_uri: str
    db_name: str = "G3N_BOT"
    owner_id: int

    # Invite tracker
    welcome_channel_id: Optional[int] = None
    invite_order: Literal["platform", "code"] = "platform"

    # Generator
    stock_dir: str = "stock"
    redeem_codes_file: str = "redeemcodes/redeemcodes.txt"
    gen_tiers: dict[str, int] = {}
    gen_cooldown_minutes: int = 5
    gen_redeem_link: str = ""

    # Tickets
    ticket_category_id: Optional[int] = None
    ticket_transcript_channel_id: Optional[int] = None
    ticket_close_delay: int = 5

    # Webhook log
    verified_channel_id: Optional[int] = None
    verified_log_file: str = "verified.txt"

    class Config:
        env_file = ".env"
        case_sensitive = False

# Global settings instance
try:
    settings = Settings()
except Exception as e:
    print(f"Error loading settings: {e}")
    # Fallback or exit if critical env vars are missing
    raise
