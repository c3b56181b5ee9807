"""금액 계산 헬퍼."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

_CENTS = Decimal("0.01")


def round_money(value: float) -> float:
    """소수점 둘째 자리 반올림 (half-up).

    float의 이진 표현 오차 때문에 round()는 2.675 -> 2.67 이 되므로
    문자열 경유 Decimal로 반올림합니다.
    """
    try:
        return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return 0.0
