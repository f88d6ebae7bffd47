from enum import Enum


class Stage(str, Enum):
    PARSE = "PARSE"
    RESOLVE = "RESOLVE"
    GENERATE = "GENERATE"
    WRITE = "WRITE"
    VALIDATE = "VALIDATE"
    TRANSFORM = "TRANSFORM"
    IMPORT = "IMPORT"

    def __str__(self) -> str:
        return self.value
