from dataclasses import dataclass
from pathlib import Path


@dataclass
class WalkthroughConfig:
    """Settings shared by every walkthrough case"""
    seed: int = 42
    n_per_group: int = 50

    # Mean offset between groups (in sd units before standardizing)
    shift: float = 2.0

    # "rescaled" case: factor applied to the second measurement
    rescale_factor: float = 10.0

    # "offset_boundary" case: unequal group sizes -> unequal priors
    boundary_sizes: tuple = (80, 20)

    # Output
    reports_dir: Path = Path("reports")
    save_plots: bool = True
    dpi: int = 200

    def case_dir(self, case_name: str) -> Path:
        return Path(self.reports_dir) / case_name
