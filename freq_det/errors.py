from __future__ import annotations


class FreqDetError(Exception):
    pass


class InvalidConfiguration(FreqDetError, ValueError):
    pass


class InvalidInputLength(FreqDetError, ValueError):
    def __init__(self, expected: int, passed: int) -> None:
        super().__init__(f"Invalid sample count passed (expected {expected}, passed {passed})")
        self.expected = int(expected)
        self.passed = int(passed)


class SilentOrDegenerateSignal(FreqDetError):
    pass


class InvalidSampleData(FreqDetError, ValueError):
    pass
