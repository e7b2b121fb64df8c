#!/usr/bin/env python3
"""
Magnetometer Calibration Command Line

Loads a sample file (one "x y z" line per sample), fits an ellipsoid and
prints the hard-iron center, soft-iron compensation matrix and validation
metrics.

Usage:
    magcal samples.txt [--json cal.json] [--plot cal.png] [--compensated out.txt]
    magcal --demo
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .compensation import validate_calibration
from .errors import CalibrationError
from .logging_config import setup_logging
from .sample_store import SampleStore
from .schema import MagCalibrationConfig
from .session import CalibrationSession
from .synthetic import demo_samples


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='magcal',
        description='Fit hard-iron and soft-iron magnetometer calibration to a sample file')
    parser.add_argument('samples', nargs='?', help='Sample file (three numbers per line)')
    parser.add_argument('--demo', action='store_true',
                        help='Calibrate a synthetic distorted ellipsoid instead of a file')
    parser.add_argument('--json', dest='json_path', help='Write the calibration result as JSON')
    parser.add_argument('--plot', dest='plot_path', help='Save a raw vs compensated plot')
    parser.add_argument('--compensated', dest='compensated_path',
                        help='Write the compensated samples in the sample file format')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--log-file', help='Also write log records to this file')
    return parser


def print_report(session: CalibrationSession, metrics: dict):
    result = session.result
    print(f"\n{'='*60}")
    print("MAGNETOMETER CALIBRATION")
    print(f"{'='*60}")
    print(f"Samples: {len(session)}")
    c = result.center
    print(f"Center (hard iron): [{c[0]:.4f}, {c[1]:.4f}, {c[2]:.4f}]")
    print("Compensation (soft iron):")
    for row in result.compensation:
        print(f"   [{row[0]:9.6f}, {row[1]:9.6f}, {row[2]:9.6f}]")
    r = result.radii
    print(f"Ellipsoid radii: [{r[0]:.4f}, {r[1]:.4f}, {r[2]:.4f}]")
    print(f"\nRaw magnitude:   {metrics['raw_mean_magnitude']:.2f} ± {metrics['raw_std_magnitude']:.3f} (CV={metrics['raw_cv']:.2%})")
    print(f"Cal magnitude:   {metrics['cal_mean_magnitude']:.2f} ± {metrics['cal_std_magnitude']:.3f} (CV={metrics['cal_cv']:.2%})")
    print(f"Improvement:     {metrics['std_improvement_ratio']:.1f}x reduction in std")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.demo and not args.samples:
        parser.error('a sample file is required unless --demo is given')

    setup_logging(getattr(logging, args.log_level), args.log_file)

    session = CalibrationSession()
    try:
        if args.demo:
            session.extend(demo_samples())
        else:
            session.load(args.samples)

        session.recalculate()
        cal_data = session.compensated_samples()
        metrics = validate_calibration(session.store.as_array(), cal_data)
        print_report(session, metrics)

        if args.json_path:
            payload = {
                'calibration': session.result.to_dict(),
                'config': MagCalibrationConfig.from_result(session.result).to_dict(),
                'metrics': metrics,
            }
            with open(args.json_path, 'w') as f:
                json.dump(payload, f, indent=2)
            print(f"\nSaved calibration to {args.json_path}")

        if args.compensated_path:
            SampleStore(cal_data).save_to_text(args.compensated_path)
            print(f"Saved compensated samples to {args.compensated_path}")

        if args.plot_path:
            from .visualize import plot_calibration
            import matplotlib.pyplot as plt

            fig = plot_calibration(session.store.as_array(), cal_data, args.plot_path)
            plt.close(fig)
            print(f"Saved plot to {args.plot_path}")

    except (CalibrationError, OSError) as e:
        print(f"Calibration failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
