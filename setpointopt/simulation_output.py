from dataclasses import dataclass, field
import numpy as np


@dataclass
class SimulationOutput:
    """
    Container for one simulator run: rows are reporting timesteps,
    columns are the output channels in the simulator's order.
    """
    data: np.ndarray                  # 2-D float table (rows x channels)
    columns: list = field(default_factory=list)  # Channel names (may be empty)
    timesteps_per_hour: int = 6       # Reporting resolution

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=float)
        if self.data.ndim != 2:
            raise ValueError(f"Simulator output must be a 2-D table, got {self.data.ndim} dimension(s)")
        if self.columns and len(self.columns) != self.data.shape[1]:
            raise ValueError(f"Got {len(self.columns)} column names for {self.data.shape[1]} columns")

    def __len__(self):
        return self.data.shape[0]

    @property
    def n_columns(self):
        return self.data.shape[1]

    def column(self, index):
        return self.data[:, index]

    def slice(self, start_idx, end_idx):
        """Returns a new SimulationOutput with rows start_idx:end_idx."""
        return SimulationOutput(
            data=self.data[start_idx:end_idx],
            columns=list(self.columns),
            timesteps_per_hour=self.timesteps_per_hour
        )
