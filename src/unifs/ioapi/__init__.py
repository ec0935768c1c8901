"""
ioapi — единый API чтения/записи поверх FileRouter.

Рекомендованный импорт:
    from unifs import ioapi as ia
"""

from unifs.ioapi import bytes, objects, txt

__all__ = ["bytes", "txt", "objects"]
