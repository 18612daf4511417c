from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class SimConfig:
    """Runtime options for one simulator session."""

    program_path: Optional[Path] = None
    max_steps: Optional[int] = None
    mask_not: bool = False
    verbose: bool = False
    gui: bool = False
    interval_ms: int = 50  # GUI clock period, 20 Hz
