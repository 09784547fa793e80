from datetime import datetime

from pydantic import BaseModel, Field


class GeneratedCode(BaseModel):
    code: str
    service: str
    tier: str
    user_id: int
    generated_at: datetime = Field(default_factory=datetime.now)

    @property
    def redeem_line(self) -> str:
        return f"{self.code} - {self.service} in {self.tier} category"


class GeneratorError(ValueError):
    """Base error for generation requests the user can fix."""
    title = "Generator error!"


class UnknownTier(GeneratorError):
    def __init__(self, tier: str):
        super().__init__(f"`{tier}` is not a generator tier!")
        self.tier = tier


class UnknownService(GeneratorError):
    def __init__(self, service: str, tier: str):
        super().__init__(f"Service `{service}` does not exist in the {tier} stock!")
        self.service = service


class OutOfStock(GeneratorError):
    def __init__(self, service: str):
        super().__init__(f"The `{service}` service is empty!")
        self.service = service


class CooldownActive(GeneratorError):
    title = "Cooldown!"

    def __init__(self, remaining: float):
        minutes, seconds = divmod(int(remaining) + 1, 60)
        super().__init__(f"Please wait **{minutes}m {seconds}s** before executing that command again!")
        self.remaining = remaining
