"""
错误通道

两类互不相交的错误:
- 硬错误 (GameError): 结构性误用，如人数不对、不是你的回合、牌不在手中。直接抛出。
- 软拒绝 (ValidationResult): 玩家可以改正的违规，如没跟花色、甩牌不合法。作为返回值，从不抛出。
"""
from dataclasses import dataclass
from typing import Optional


# 错误码
INVALID_SEATS = "INVALID_SEATS"
INVALID_DEALER = "INVALID_DEALER"
INVALID_CONFIG = "INVALID_CONFIG"
INVALID_TRICK = "INVALID_TRICK"
INVALID_PLAY = "INVALID_PLAY"
INVALID_PHASE = "INVALID_PHASE"
INVALID_DISCARD = "INVALID_DISCARD"
UNKNOWN_SEAT = "UNKNOWN_SEAT"
INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


class GameError(ValueError):
    """引擎硬错误基类"""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class ConfigError(GameError):
    """配置非法"""

    def __init__(self, message: str):
        super().__init__(INVALID_CONFIG, message)


class PhaseError(GameError):
    """当前阶段不允许该操作"""

    def __init__(self, message: str):
        super().__init__(INVALID_PHASE, message)


class InvalidPlayError(GameError):
    """出牌被拒绝"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(INVALID_PLAY, f"Invalid card play: {reason}")


class InvariantError(GameError):
    """内部不变量被破坏 (重复牌、墩牌数量异常等)"""

    def __init__(self, message: str):
        super().__init__(INVARIANT_VIOLATION, message)


@dataclass(frozen=True)
class ValidationResult:
    """
    软校验结果

    Attributes:
        valid: 是否合法
        message: 不合法时给玩家看的原因
    """
    valid: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def reject(cls, message: str) -> 'ValidationResult':
        return cls(valid=False, message=message)

    @property
    def reason(self) -> Optional[str]:
        return self.message

    def __bool__(self) -> bool:
        return self.valid
