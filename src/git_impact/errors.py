from __future__ import annotations


class ImpactError(ValueError):
    pass


class GlobSyntaxError(ImpactError):
    def __init__(self, position: int, message: str) -> None:
        self.position = position
        self.message = message
        super().__init__(f"Syntax error at character {position}: {message}.")


class UnsupportedGlobFeature(GlobSyntaxError):
    def __init__(self, feature: str, position: int) -> None:
        self.feature = feature
        super().__init__(position, f"{feature} is not supported")


class MalformedLogRecord(ImpactError):
    def __init__(self, block_index: int, reason: str) -> None:
        self.block_index = block_index
        self.reason = reason
        super().__init__(f"malformed log record #{block_index}: {reason}")


class RuleFileError(ImpactError):
    def __init__(self, source: str, line_number: int, message: str) -> None:
        self.source = source
        self.line_number = line_number
        self.message = message
        where = f"{source}:{line_number}" if line_number else source
        super().__init__(f"{where}: {message}")
