from enum import auto

from billiards.utils.types import EnumAutoStr


class UserAccountType(EnumAutoStr):
    ADMIN = auto()
    VIEWER = auto()
