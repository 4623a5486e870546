"""
Load and plot an interval log written by the pressure logger.

Usage:
    python utils/plot_pressure_log.py dataPressureTransducer.csv [output.png]
"""
import sys
from pathlib import Path

import pandas as pd
import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).parent.parent))

import config

TIME_COL = "Date and Time"
PRESSURE_COL = "Pressure [PSI]"


def load_pressure_log(file_path) -> pd.DataFrame:
    """
    Read an interval log into a DataFrame indexed by timestamp.

    Args:
        file_path: Path to the CSV log

    Returns:
        DataFrame with a single PRESSURE_COL column and a DatetimeIndex
    """
    df = pd.read_csv(file_path, sep=config.CSV_DELIMITER, skipinitialspace=True)
    df.columns = [col.strip() for col in df.columns]
    df[TIME_COL] = pd.to_datetime(df[TIME_COL], format=config.TIMESTAMP_FORMAT)
    return df.set_index(TIME_COL)


def summarize(df: pd.DataFrame) -> dict:
    """Basic statistics of the logged pressure."""
    pressure = df[PRESSURE_COL]
    return {
        'intervals': len(pressure),
        'start': df.index.min(),
        'end': df.index.max(),
        'min': pressure.min(),
        'max': pressure.max(),
        'mean': pressure.mean(),
        'std': pressure.std(),
    }


def plot_pressure_log(file_path, output_path=None) -> Path:
    """
    Plot pressure vs time and save it as a PNG next to the log.

    Returns:
        Path of the saved figure
    """
    file_path = Path(file_path)
    df = load_pressure_log(file_path)
    stats = summarize(df)

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(df.index, df[PRESSURE_COL], color='tab:blue')
    ax.set_xlabel(TIME_COL)
    ax.set_ylabel(PRESSURE_COL)
    ax.set_title(file_path.name)
    ax.grid(True)
    stat_text = f"min={stats['min']:.3f}\nmax={stats['max']:.3f}\nmean={stats['mean']:.3f}"
    ax.text(0.98, 0.02, stat_text, transform=ax.transAxes, fontsize=8, ha='right', va='bottom',
            bbox=dict(facecolor='white', alpha=0.7, edgecolor='none'))
    fig.autofmt_xdate()
    plt.tight_layout()

    if output_path is None:
        output_path = file_path.with_name(f"plot_{file_path.stem}.png")
    output_path = Path(output_path)
    fig.savefig(output_path)
    plt.close(fig)
    return output_path


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__)
        return 1
    output_path = plot_pressure_log(argv[0], argv[1] if len(argv) > 1 else None)
    print(f"Plot saved to {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
