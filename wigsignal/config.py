"""Analysis configuration helpers."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from wigsignal.smoothing import SmoothingMethod


@dataclass(frozen=True)
class AnalysisConfig:
    telomere_length: int = 100_000
    centromere_window: int = 50_000
    only_complete: bool = False
    require_complete: bool = False
    smoothing_method: SmoothingMethod = SmoothingMethod.WINDOW_MEAN
    bandwidth: int = 200
    kernel_step: Optional[int] = None
    smooth_chrom: Optional[str] = None

    def __post_init__(self) -> None:
        # Values may arrive as strings from JSON or the command line.
        object.__setattr__(self, "smoothing_method", _parse_method(self.smoothing_method))
        for name in ("telomere_length", "centromere_window", "bandwidth"):
            value = int(getattr(self, name))
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")
            object.__setattr__(self, name, value)
        if self.kernel_step is not None:
            step = int(self.kernel_step)
            if step < 1:
                raise ValueError(f"kernel_step must be >= 1, got {step}")
            object.__setattr__(self, "kernel_step", step)
        if self.kernel_step is not None and self.smoothing_method is not SmoothingMethod.KERNEL:
            raise ValueError("kernel_step only applies to smoothing_method='kernel'")
        if self.smooth_chrom is not None:
            object.__setattr__(self, "smooth_chrom", str(self.smooth_chrom))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}. Valid keys: {', '.join(sorted(known))}.")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> "AnalysisConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a JSON object: {path}")
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def smoothing_kwargs(self) -> Dict[str, Any]:
        if self.smoothing_method is SmoothingMethod.KERNEL and self.kernel_step is not None:
            return {"step": self.kernel_step}
        return {}

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["smoothing_method"] = self.smoothing_method.value
        return out


def _parse_method(value: SmoothingMethod | str) -> SmoothingMethod:
    try:
        return SmoothingMethod(value)
    except ValueError:
        valid = ", ".join(m.value for m in SmoothingMethod)
        raise ValueError(f"Unknown smoothing method: {value}. Use one of: {valid}.") from None
