import sys

import matplotlib.pyplot as plt
import numpy as np

from .energy import joules_to_kwh


def print_report(objectives, title="OBJECTIVE RESULTS"):
    print("\n" + "="*40)
    print(title)
    print("="*40)
    print(f"Total Energy:          {objectives.total_energy:.0f} J ({joules_to_kwh(objectives.total_energy):.2f} kWh)")
    print(f"Peak Power:            {objectives.peak_power:.3f} kW")
    print(f"Average PMV:           {objectives.average_pmv:+.3f}")
    print(f"PMV Violations:        {objectives.pmv_violation:.0f}")
    print(f"Setpoint Violation:    {objectives.setpoint_violation:.1f} C")
    print("-" * 40)
    print(f"Basic Charge:          {objectives.basic_rate:.0f}")
    print(f"Energy Charge:         {objectives.energy_rate:.0f}")
    print("="*40)
    sys.stdout.flush()


def plot_results(output, config, schedule=None, title_suffix=""):
    """
    Two-panel diagnostic plot of one simulated day.

    Args:
        output: SimulationOutput of the run.
        config: ExtractorConfig used for the evaluation.
        schedule: Optional hourly setpoint schedule that was commanded.
    """
    data = output.data
    tph = config.timesteps_per_hour
    hours = (np.arange(len(output)) + 1) / tph

    plt.figure(figsize=(14, 8))

    # Subplot 1: Setpoint & Comfort
    ax1 = plt.subplot(2, 1, 1)
    for col in config.setpoint_columns:
        ax1.plot(hours, data[:, col], label='Applied Setpoint', color='orange', linewidth=2)
    if schedule is not None:
        ax1.step(np.arange(len(schedule)), schedule, where='post', label='Commanded Schedule',
                 color='grey', linestyle='--')
    ax1.set_ylabel("Temperature (C)")

    ax2 = ax1.twinx()
    for col in config.pmv_columns:
        ax2.plot(hours, data[:, col], label=f'PMV (col {col})', color='green', alpha=0.6)
    ax2.axhline(0.5, color='green', linestyle=':', alpha=0.4)
    ax2.axhline(-0.5, color='green', linestyle=':', alpha=0.4)
    ax2.set_ylabel("PMV")

    win = config.comfort_window
    ax1.axvspan((win.start + 1) / tph, (win.end + 1) / tph, color='green', alpha=0.05, label='Comfort Window')

    title = "Setpoint Evaluation"
    if title_suffix:
        title += f" - {title_suffix}"
    ax1.set_title(title)
    ax1.legend(loc='upper left')
    ax2.legend(loc='upper right')
    ax1.grid(True)

    # Subplot 2: Power
    plt.subplot(2, 1, 2)
    # Same channels as the peak power objective
    per_step = np.sum(data[:, list(config.peak_power_columns)], axis=1)
    power_kw = joules_to_kwh(per_step) / config.sampling_period_hours
    label = 'Electric + Cooling Power (kW)' if config.peak_includes_cooling else 'Electric Power (kW)'
    plt.plot(hours, power_kw, label=label, color='red', alpha=0.6)
    plt.xlabel("Hour of Day")
    plt.ylabel("Power (kW)")
    plt.legend()
    plt.grid(True)

    plt.tight_layout()
    plt.show()
