import argparse
import subprocess
import sys
from pathlib import Path

import pandas as pd


def run_command(cmd: list[str]) -> None:
    print(f">> {' '.join(cmd)}")
    subprocess.run(cmd, check=True)


def describe_jsonl(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} does not exist")
        return
    df = pd.read_json(path, lines=True)
    cols = ["turns", "length", "food_moves", "forced_rate"]
    print(f"\n--- {label} ({path.name}) ---")
    print(df[cols].describe())
    print(f"win rate: {100.0 * df['won'].mean():.1f}%")
    print(df["death_reason"].fillna("survived").value_counts().to_string())


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark the engine against itself and random opponents")
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed to fix during the benchmark",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Number of games per opponent pool",
    )
    parser.add_argument(
        "--snakes",
        type=int,
        default=4,
        help="Snakes per game",
    )
    parser.add_argument(
        "--hazards",
        type=int,
        default=0,
        help="Static hazard cells per game",
    )
    parser.add_argument(
        "--runs-dir",
        type=Path,
        default=Path("runs"),
        help="Where to emit JSONL telemetry files",
    )

    args = parser.parse_args()
    args.runs_dir.mkdir(exist_ok=True)

    logs = []
    for opponents in ("self", "random"):
        log_path = args.runs_dir / f"{opponents}_seed{args.seed}.jsonl"
        run_command(
            [
                sys.executable,
                "-m",
                "snakebrain",
                "--no-render",
                "--no-save",
                "--num-games",
                str(args.games),
                "--seed",
                str(args.seed),
                "--snakes",
                str(args.snakes),
                "--hazards",
                str(args.hazards),
                "--opponents",
                opponents,
                "--log-jsonl",
                str(log_path),
            ]
        )
        logs.append((log_path, f"vs {opponents}"))

    for path, label in logs:
        describe_jsonl(path, label)


if __name__ == "__main__":
    main()
