import asyncio
import re
from pathlib import Path

from core.config import settings
from core.logger import setup_logger
from modules.generator.models import (
    GeneratedCode, UnknownTier, UnknownService, OutOfStock, CooldownActive,
)
from utils.cooldowns import CooldownTracker

logger = setup_logger("generator_service")

SERVICE_NAME = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class GeneratorService:
    """
    Hands out pre-stocked codes, one line of ``<stock_dir>/<tier>/<service>.txt`` at a time.
    """

    def __init__(self, stock_dir: str, tiers: dict[str, int], redeem_codes_file: str, cooldown_minutes: float):
        self.stock_dir = Path(stock_dir)
        self.tiers = tiers
        self.redeem_codes_file = Path(redeem_codes_file)
        self.cooldowns = CooldownTracker(seconds=cooldown_minutes * 60)
        self._file_locks: dict[Path, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls) -> "GeneratorService":
        return cls(
            stock_dir=settings.stock_dir,
            tiers=settings.gen_tiers,
            redeem_codes_file=settings.redeem_codes_file,
            cooldown_minutes=settings.gen_cooldown_minutes,
        )

    def channel_for(self, tier: str) -> int:
        if tier not in self.tiers:
            raise UnknownTier(tier)
        return self.tiers[tier]

    def _stock_file(self, tier: str, service: str) -> Path:
        self.channel_for(tier)
        if not SERVICE_NAME.match(service):
            raise UnknownService(service, tier)
        path = self.stock_dir / tier / f"{service}.txt"
        if not path.is_file():
            raise UnknownService(service, tier)
        return path

    def _lock_for(self, path: Path) -> asyncio.Lock:
        if path not in self._file_locks:
            self._file_locks[path] = asyncio.Lock()
        return self._file_locks[path]

    @staticmethod
    def _pop_first_line(path: Path) -> str | None:
        lines = path.read_text(encoding="utf-8").splitlines()
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            return None

        code = lines.pop(0).strip()
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return code

    def _append_redeem_line(self, line: str) -> None:
        self.redeem_codes_file.parent.mkdir(parents=True, exist_ok=True)
        with self.redeem_codes_file.open("a", encoding="utf-8") as f:
            f.write(f"{line}\n")

    async def generate(self, tier: str, service: str, user_id: int) -> GeneratedCode:
        """
        Take the next code for ``service`` out of the ``tier`` stock.
        Raises a GeneratorError subclass when the request cannot be served.
        """
        path = self._stock_file(tier, service)

        # Check and start the cooldown with no await in between, so a second
        # request from the same user sees it even while this one is still running
        key = (tier, user_id)
        remaining = self.cooldowns.remaining(key)
        if remaining > 0:
            raise CooldownActive(remaining)
        self.cooldowns.start(key)

        try:
            async with self._lock_for(path):
                code = await asyncio.to_thread(self._pop_first_line, path)
                if code is None:
                    raise OutOfStock(service)

                generated = GeneratedCode(code=code, service=service, tier=tier, user_id=user_id)
                await asyncio.to_thread(self._append_redeem_line, generated.redeem_line)
        except (OutOfStock, OSError):
            self.cooldowns.clear(key)
            raise

        logger.info(f"User {user_id} generated a {service} code from {tier} stock")
        return generated

    @staticmethod
    def _count_stock(tier_dir: Path) -> dict[str, int]:
        if not tier_dir.is_dir():
            return {}

        counts = {}
        for path in sorted(tier_dir.glob("*.txt")):
            lines = path.read_text(encoding="utf-8").splitlines()
            counts[path.stem] = sum(1 for line in lines if line.strip())
        return counts

    async def stock(self, tier: str) -> dict[str, int]:
        """Number of codes left per service in a tier."""
        self.channel_for(tier)
        return await asyncio.to_thread(self._count_stock, self.stock_dir / tier)
