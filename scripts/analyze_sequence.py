from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from candle_odds.analysis.profiles import resolve_profile
from candle_odds.analysis.rules import SequenceValidationError
from candle_odds.analysis.service import AnalysisService
from candle_odds.candles.dataset import load_dataset
from candle_odds.core.settings import parse_timeframe_widths, settings
from candle_odds.utils.logger import configure_logging


def _load_sequence(args: argparse.Namespace) -> list:
    if args.sequence_file:
        raw = Path(args.sequence_file).read_text(encoding="utf-8")
    else:
        raw = args.sequence or ""
    data = json.loads(raw)
    # Accept either a bare rule list or a full request body.
    if isinstance(data, dict):
        data = data.get("sequence")
    return data


def main() -> int:
    ap = argparse.ArgumentParser(description="Historical next-candle odds for a candle sequence.")
    ap.add_argument("--data-dir", default=settings.DATA_DIR, help="directory of candle CSV files")
    ap.add_argument("--interval-seconds", type=int, default=settings.BASE_INTERVAL_SECONDS)
    ap.add_argument("--timeframes", default=settings.TIMEFRAMES, help="comma-separated widths in base intervals")
    ap.add_argument("--profile", default=settings.ENGINE_PROFILE, help="classic|extended")
    ap.add_argument("--timeframe", default=None, help="e.g. 5m, 1h (default: base)")
    ap.add_argument("--sequence", default=None, help='JSON rule list, e.g. [{"direction":"Bearish",...}]')
    ap.add_argument("--sequence-file", default=None, help="path to a JSON rule list or request body")
    ap.add_argument("--status", action="store_true", help="print dataset status and exit")
    ap.add_argument("--log-level", default="WARNING")

    args = ap.parse_args()
    configure_logging(args.log_level)

    try:
        widths = parse_timeframe_widths(args.timeframes)
    except ValueError as e:
        ap.error(f"--timeframes: {e}")
    dataset = load_dataset(args.data_dir, interval_seconds=args.interval_seconds, widths=widths)
    svc = AnalysisService(dataset, resolve_profile(args.profile))

    if args.status:
        print(json.dumps(svc.status(), indent=2))
        return 0

    if not args.sequence and not args.sequence_file:
        raise SystemExit("--sequence or --sequence-file is required")

    payload = {"sequence": _load_sequence(args)}
    if args.timeframe:
        payload["timeframe"] = args.timeframe

    try:
        result = svc.analyze(payload)
    except SequenceValidationError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
