from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

COLUMNS = ["turns", "length", "decisions", "food_moves", "safety_forced", "forced_rate"]


def load(path: Path) -> pd.DataFrame | None:
    if not path.exists():
        print(f"warning: {path} not found")
        return None
    return pd.read_json(path, lines=True)


def describe(df: pd.DataFrame, label: str) -> None:
    print(f"\n--- {label} ---")
    print(df[[c for c in COLUMNS if c in df.columns]].describe())
    print(f"win rate: {100.0 * df['won'].mean():.1f}% over {len(df)} games")
    deaths = df["death_reason"].fillna("survived").value_counts()
    print("deaths:")
    print(deaths.to_string())
    rejects = [c for c in df.columns if c.startswith("reject_")]
    if rejects:
        print("rejections per game:")
        print(df[rejects].fillna(0).mean().round(2).to_string())
    total_forced = df["safety_forced"].sum()
    total_decisions = df["decisions"].sum()
    if total_decisions:
        rate = 100.0 * total_forced / total_decisions
        print(f"session forced rate: {rate:.2f}% ({total_forced} forced / {total_decisions} decisions)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare two JSONL arena logs")
    parser.add_argument(
        "--baseline",
        type=Path,
        default=Path("runs/baseline.jsonl"),
        help="Reference log",
    )
    parser.add_argument(
        "--candidate",
        type=Path,
        default=Path("runs/candidate.jsonl"),
        help="Log to compare against the baseline",
    )
    args = parser.parse_args()

    frames = {}
    for label, path in (("baseline", args.baseline), ("candidate", args.candidate)):
        df = load(path)
        if df is None:
            continue
        describe(df, f"{label} ({path.name})")
        frames[label] = df

    if len(frames) == 2:
        summary = pd.DataFrame(
            {
                label: {
                    "win_rate": df["won"].mean(),
                    "avg_turns": df["turns"].mean(),
                    "avg_length": df["length"].mean(),
                    "forced_rate": df["forced_rate"].mean(),
                }
                for label, df in frames.items()
            }
        )
        summary["delta"] = summary["candidate"] - summary["baseline"]
        print("\n--- comparison ---")
        print(summary.round(3))


if __name__ == "__main__":
    main()
