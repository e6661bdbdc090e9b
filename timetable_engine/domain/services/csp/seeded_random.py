"""シード付き擬似乱数

線形合同法による決定的な乱数です。状態を持たない純粋関数として実装し、
シードは呼び出し側が受け渡します。
"""
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar('T')

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280


def normalize_seed(seed: float) -> int:
    """任意の数値シードを乱数列の状態に変換"""
    return int(seed) % MODULUS


def next_random(seed: int) -> Tuple[float, int]:
    """次の乱数を生成

    Returns:
        (0以上1未満の値, 次のシード)
    """
    next_seed = (seed * MULTIPLIER + INCREMENT) % MODULUS
    return next_seed / MODULUS, next_seed


def shuffled(items: Sequence[T], seed: int) -> Tuple[List[T], int]:
    """Fisher-Yatesでシャッフルしたコピーと次のシードを返す"""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        value, seed = next_random(seed)
        j = int(value * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result, seed
