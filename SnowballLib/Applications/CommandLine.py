import argparse
import json
import logging
from pathlib import Path

import matplotlib.pyplot as plt

from SnowballLib.Base.Config import EvaluationConfig
from SnowballLib.Base.DataLoader import load_price_series
from SnowballLib.Base.Utils import PlotUtils
from SnowballLib.Evaluation.EvaluationApp import run_evaluation_logic

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = EvaluationConfig()
    p = argparse.ArgumentParser(prog="snowball-eval",
                                description="Historical knock-out / knock-in evaluation of snowball products")
    p.add_argument("path", type=Path, help="Price file (.xlsx / .csv)")
    p.add_argument("--sheet", default=0, help="Excel sheet name or index (default: first sheet)")
    p.add_argument("--date-col", default="date", help="Date column name (default: date)")
    p.add_argument("--price-col", default="price", help="Price column name (default: price)")
    p.add_argument("--tenure", type=int, default=defaults.tenure, help="Product tenure in months")
    p.add_argument("--lock-in", dest="lock_in_period", type=int, default=defaults.lock_in_period,
                   help="Lock-in period in months")
    p.add_argument("--upper", dest="upper_ratio", type=float, default=defaults.upper_ratio,
                   help="Knock-out barrier as a ratio of the start price")
    p.add_argument("--lower", dest="lower_ratio", type=float, default=defaults.lower_ratio,
                   help="Knock-in barrier as a ratio of the start price")
    p.add_argument("--output", type=Path, default=None, help="Write the per-row result table to this CSV")
    p.add_argument("--plot", type=Path, default=None, help="Save the result chart to this image file")
    p.add_argument("--summary", action="store_true", help="Print summary statistics as JSON")
    p.add_argument("--progress", action="store_true", help="Show a progress bar")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    sheet = int(args.sheet) if str(args.sheet).isdigit() else args.sheet
    price_df = load_price_series(args.path, date_col=args.date_col, price_col=args.price_col, sheet_name=sheet)

    config = EvaluationConfig(
        tenure=args.tenure,
        lock_in_period=args.lock_in_period,
        upper_ratio=args.upper_ratio,
        lower_ratio=args.lower_ratio,
    )
    result_df, summary = run_evaluation_logic(price_df, config, show_progress=args.progress)

    if args.output is not None:
        result_df.to_csv(args.output, index=False, date_format="%Y-%m-%d")
        logger.info("Results written to %s", args.output)

    if args.plot is not None:
        fig = PlotUtils.plot_sweep_results(result_df, show_plot=False)
        fig.savefig(args.plot, dpi=120)
        plt.close(fig)
        logger.info("Chart written to %s", args.plot)

    if args.summary:
        print(json.dumps(summary, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
