import logging
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

import pandas as pd
import matplotlib.pyplot as plt

try:
    import seaborn as sns
    HAS_SEABORN = True
except Exception:
    HAS_SEABORN = False


class BenchmarkProfile(Enum):
    """Available benchmark profiles for different measurement focuses"""
    ESTIMATION_TIMING = auto()  # context/key generation and loop times
    CAPABILITY = auto()         # depth and remaining budget per case
    ALL = auto()                # enable all metrics


class BenchmarkManager:
    """Collects benchmark events and provides export + plotting helpers.

    Events are timestamped and tagged with the case (component) they belong
    to. Seaborn is used for plots when available, otherwise plain matplotlib.
    """

    def __init__(self, profiles: Optional[List[BenchmarkProfile]] = None):
        self.logs: List[Dict] = []
        self.active_profiles: Set[BenchmarkProfile] = (
            {BenchmarkProfile.ALL} if profiles is None else set(profiles)
        )
        self.logger = logging.getLogger(__name__)

        # metrics grouped by profile
        self.profile_metrics: Dict[BenchmarkProfile, Set[str]] = {
            BenchmarkProfile.ESTIMATION_TIMING: {
                'Context Generation Time', 'Key Generation Time', 'Estimation Time'
            },
            BenchmarkProfile.CAPABILITY: {
                'Max Depth', 'Noise Budget'
            },
        }

        self.logger.info(
            f"BenchmarkManager initialized with profiles: {[p.name for p in self.active_profiles]}"
        )

    # ---- basic operations -------------------------------------------------
    def should_log_metric(self, metric_name: str) -> bool:
        """Decide whether to log a metric based on active profiles (exact match)."""
        if BenchmarkProfile.ALL in self.active_profiles:
            return True
        for profile in self.active_profiles:
            if metric_name in self.profile_metrics.get(profile, set()):
                return True
        return False

    def log_event(self, component_id: str, metric_name: str, value: float, unit: str = '', tags: Dict[str, str] = None):
        """Record a timestamped metric event (if enabled by profile).

        tags (optional) are merged into the event dict to allow grouping.
        """
        if not self.should_log_metric(metric_name):
            return

        entry = {
            'timestamp': datetime.now(),
            'component_id': component_id,
            'metric': metric_name,
            'value': float(value),
            'unit': unit or ''
        }
        if tags:
            entry.update(tags)

        self.logs.append(entry)

    # ---- introspection & export -------------------------------------------
    def get_benchmark_data(self, filter_profile: Optional[BenchmarkProfile] = None) -> pd.DataFrame:
        if not self.logs:
            return pd.DataFrame()
        df = pd.DataFrame(self.logs)
        if filter_profile and filter_profile != BenchmarkProfile.ALL:
            metrics = self.profile_metrics.get(filter_profile, set())
            df = df[df['metric'].isin(metrics)]
        return df

    def summary(self) -> pd.DataFrame:
        """One row per case, one column per metric (mean over repeated events)."""
        df = self.get_benchmark_data()
        if df.empty:
            return df
        return df.pivot_table(index='component_id', columns='metric', values='value', aggfunc='mean')

    def export_to_csv(self, filepath: Union[str, Path], filter_profile: Optional[BenchmarkProfile] = None):
        path = Path(filepath)
        df = self.get_benchmark_data(filter_profile)
        if df.empty:
            self.logger.warning("No benchmark data to export")
            return
        df.to_csv(path, index=False)
        self.logger.info(f"Exported benchmark data to {path}")

    # ---- plotting helpers -------------------------------------------------
    def setup_plot_style(self):
        plt.style.use('default')
        plt.rcParams.update({
            'figure.figsize': (12, 6),
            'axes.titlesize': 14,
            'axes.labelsize': 12,
            'axes.grid': True,
            'grid.alpha': 0.25,
        })

    def plot_depth_summary(self, save_path: Optional[Union[str, Path]] = None):
        """Bar chart of the maximum depth reached by each case."""
        self.setup_plot_style()
        df = self.get_benchmark_data(BenchmarkProfile.CAPABILITY)
        if df.empty:
            self.logger.warning("No data to plot (depth summary)")
            return
        depths = df[df['metric'] == 'Max Depth']
        if depths.empty:
            self.logger.warning("No data for metric: Max Depth")
            return

        fig, ax = plt.subplots()
        if HAS_SEABORN:
            sns.barplot(data=depths, x='component_id', y='value', ax=ax)
        else:
            ax.bar(depths['component_id'], depths['value'])
        ax.set_xlabel('Case')
        ax.set_ylabel('Maximum depth')
        ax.set_title('Multiplicative Depth by Parameter Set')
        plt.setp(ax.get_xticklabels(), rotation=45, ha='right')
        fig.tight_layout()
        if save_path:
            fig.savefig(str(save_path))
        plt.close(fig)
