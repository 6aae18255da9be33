"""Development entrypoint: run a batch of AI balance simulations."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from stellar_arena.config import get_settings
from stellar_arena.domain.simulation import format_report, simulate_batch
from stellar_arena.schemas.simulation import SimulationConfig


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Simulate Stellar Arena battles")
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help=f"Battles per scenario (default {settings.iterations})",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help=f"Round cap per battle (default {settings.max_rounds})",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Scenario JSON, inline or a path to a file",
    )
    parser.add_argument("--verbose", action="store_true", help="Log AI and turn details")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    payload: dict = {"iterations": settings.iterations, "maxRounds": settings.max_rounds}
    if args.config:
        text = args.config
        if not text.lstrip().startswith("{"):
            text = Path(text).read_text(encoding="utf-8")
        payload.update(json.loads(text))
    if args.iterations is not None:
        payload["iterations"] = args.iterations
    if args.max_rounds is not None:
        payload["maxRounds"] = args.max_rounds
    config = SimulationConfig.model_validate(payload)

    reports = simulate_batch(config.scenarios, config.iterations, config.max_rounds)
    print(format_report(reports))


if __name__ == "__main__":
    main()
