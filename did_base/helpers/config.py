# config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

RESULT_FIELD = "result"


@dataclass
class ProceedOptions:
    # =========================
    # Tracing
    # =========================
    verbose: bool = False

    # =========================
    # Returned fields
    # =========================
    # Extra field names to return next to "result" (a str or an iterable of str).
    keep: Optional[Union[str, Iterable[str]]] = None
    # Return the whole trace of every specification.
    keepall: bool = False

    # =========================
    # Debugging
    # =========================
    # Stop after this many shared steps; 0 runs everything.
    pause: int = 0

    # =========================
    # Batch builder only
    # =========================
    # Only build the specifications, do not run them.
    noproceed: bool = False

    def __post_init__(self) -> None:
        if self.keep is not None and not isinstance(self.keep, str):
            try:
                self.keep = tuple(self.keep)
            except TypeError:
                raise TypeError(
                    "expect a str or a collection of str for the value of option `keep`"
                ) from None
        if isinstance(self.pause, bool) or not isinstance(self.pause, int):
            raise ValueError(f"pause must be a nonnegative integer, got {self.pause!r}")
        if self.pause < 0:
            raise ValueError(f"pause must be a nonnegative integer, got {self.pause}")

    def keep_names(self) -> Optional[Tuple[str, ...]]:
        """Return the validated ``keep`` names with ``"result"`` appended, or ``None``."""
        if self.keep is None:
            return None
        keep = (self.keep,) if isinstance(self.keep, str) else tuple(self.keep)
        if not all(isinstance(k, str) for k in keep):
            raise TypeError(
                "expect a str or a collection of str for the value of option `keep`"
            )
        if RESULT_FIELD not in keep:
            keep = keep + (RESULT_FIELD,)
        return keep


__all__ = ["ProceedOptions", "RESULT_FIELD"]
