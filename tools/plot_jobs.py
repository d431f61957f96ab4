import os
import sys

import matplotlib.pyplot as plt
import pandas as pd


def plot_jobs(jobs_csv, out_file='jobs_plot.png'):
    # Cargar datos
    df = pd.read_csv(jobs_csv).sort_values('arrival_time')

    # Configurar plot
    fig, axs = plt.subplots(2, 1, figsize=(10, 10), sharex=True)

    # 1. Lead time
    axs[0].scatter(df['arrival_time'], df['lead_time'], s=6, label='Lead time WIP', color='blue')
    axs[0].plot(df['arrival_time'], df['lead_time'].rolling(50, min_periods=1).mean(),
                label='Media móvil (50)', color='black', linewidth=2)
    axs[0].set_ylabel('Lead time (u.t.)')
    axs[0].set_title('Lead time por orden')
    axs[0].legend()
    axs[0].grid(True, alpha=0.3)

    # 2. Tardanza y service level
    axs[1].scatter(df['arrival_time'], df['tardiness'], s=6, label='Tardanza', color='red')
    ax2 = axs[1].twinx()
    ax2.plot(df['arrival_time'], df['service_level'].expanding().mean(),
             label='Service level acumulado', color='green', linestyle='--')
    ax2.set_ylim(0, 1.05)
    ax2.set_ylabel('Service level')
    axs[1].set_ylabel('Tardanza (u.t.)')
    axs[1].set_xlabel('Llegada (u.t.)')
    axs[1].set_title('Puntualidad por orden')
    axs[1].legend(loc='upper left')
    ax2.legend(loc='upper right')
    axs[1].grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(out_file, dpi=150)
    print(f"[OK] Gráfica guardada en: {out_file}")


if __name__ == "__main__":
    if len(sys.argv) < 2 or not os.path.exists(sys.argv[1]):
        print("[ERROR] Uso: python tools/plot_jobs.py <archivo_jobs.csv> [salida.png]")
        sys.exit(1)
    plot_jobs(sys.argv[1], *sys.argv[2:3])
