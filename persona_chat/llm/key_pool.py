# persona_chat/llm/key_pool.py
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from persona_chat.logger import mask_key

logger = logging.getLogger(__name__)


@dataclass
class KeyStatus:
    rate_limited_until: float = 0.0
    failure_count: int = 0


class ApiKeyPool:
    """API 키 순환 - rate limit 걸린 키는 쿨다운 동안 건너뜀"""

    def __init__(
        self,
        keys: Sequence[str],
        cooldown: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._keys: List[str] = list(dict.fromkeys(keys))
        self._cooldown = cooldown
        self._clock = clock
        self._statuses: Dict[str, KeyStatus] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def acquire(self) -> Optional[str]:
        """사용 가능한 첫 번째 키. 전부 쿨다운이면 가장 빨리 풀리는 키"""
        if not self._keys:
            return None

        now = self._clock()
        for key in self._keys:
            status = self._statuses.get(key)
            if status is None or status.rate_limited_until <= now:
                return key

        return min(self._keys, key=lambda k: self._statuses[k].rate_limited_until)

    def mark_rate_limited(self, key: str, retry_after: Optional[float] = None) -> None:
        cooldown = retry_after if retry_after else self._cooldown
        status = self._statuses.setdefault(key, KeyStatus())
        status.rate_limited_until = self._clock() + cooldown
        status.failure_count += 1
        logger.warning(f"Key {mask_key(key)} rate limited for {cooldown:.1f}s (failures: {status.failure_count})")

    def mark_success(self, key: str) -> None:
        self._statuses.pop(key, None)

    def statuses(self) -> List[dict]:
        """헬스체크용 키 상태 (마스킹)"""
        now = self._clock()
        result = []
        for i, key in enumerate(self._keys, start=1):
            status = self._statuses.get(key)
            remaining = max(0.0, status.rate_limited_until - now) if status else 0.0
            result.append({
                "key": f"key{i}",
                "masked": mask_key(key),
                "available": remaining == 0.0,
                "cooldown_remaining": round(remaining, 3),
            })
        return result
