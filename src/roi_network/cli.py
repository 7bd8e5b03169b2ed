"""CLI entry point for roi-network."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .config import NetworkConfig
from .core import RoiNetworkAnalyzer
from .errors import RoiNetworkError
from .io.network_file import load_network_file
from .io.recording import load_recording
from .reductions import CONNECTIVITY_REDUCTIONS, POWER_REDUCTIONS
from .results import results_to_frame


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(path: Path | None) -> NetworkConfig:
    return NetworkConfig.from_yaml(path) if path is not None else NetworkConfig()


def _to_plain(value):
    """numpy values -> lists/floats for yaml.safe_dump, through nested dicts."""
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if hasattr(value, "tolist"):
        return value.tolist()
    return value


def cmd_run(args):
    """Compute ROI band power and network connectivity for one recording."""
    config = _load_config(args.config)
    bundle = load_network_file(args.network_file)
    recording = load_recording(args.recording)

    analyzer = RoiNetworkAnalyzer(bundle, config)
    print(f"Recording: {args.recording.name} ({recording.n_channels} channels, "
          f"{recording.n_trials} trials, {recording.sfreq:.0f} Hz)")
    print(f"ROIs: {len(analyzer.roi_ids)}  Networks: {len(bundle.networks)}")
    print()

    results = analyzer.run(recording)

    output_dir = args.output
    output_dir.mkdir(parents=True, exist_ok=True)
    results_to_frame(results).to_csv(output_dir / "results.csv", index=False)

    payload = _to_plain(results.wrapped() if config.wrap_output else dict(results))
    with open(output_dir / "results.yaml", "w") as f:
        yaml.safe_dump(payload, f, default_flow_style=False, sort_keys=False)

    if results.diagnostics:
        results.diagnostics_frame().to_csv(output_dir / "diagnostics.csv", index=False)
        print(f"Diagnostics ({len(results.diagnostics)}):")
        for d in results.diagnostics:
            print(f"  - {d.target}: {d.kind}: {d.message}")

    if args.figures:
        from .viz.network_plots import plot_results

        plot_results(
            results,
            {rid: bundle.roi_label(rid) for rid in bundle.rois},
            {net.name: list(net.roi_ids) for net in bundle.networks},
            output_dir / "figures",
            use_db=config.use_db,
        )

    print(f"\nDone. {len(results)} metrics. Output: {output_dir}")
    if results.incomplete:
        print("WARNING: deadline reached, results are incomplete")


def cmd_validate(args):
    """Validate a network file and configuration."""
    try:
        config = _load_config(args.config)
        bundle = load_network_file(args.network_file)
        analyzer = RoiNetworkAnalyzer(bundle, config)
        analyzer.validate(args.sfreq)
    except (RoiNetworkError, FileNotFoundError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Network file: {args.network_file}")
    print(f"Channels: {bundle.n_channels}  Voxels: {bundle.n_voxels}  ROIs: {len(bundle.rois)}")
    print(f"\nNetworks: {len(bundle.networks)}")
    for net in bundle.networks:
        print(f"  {net.name}: {len(net.roi_ids)} ROIs")
    print(f"\nBands: {len(config.bands)}")
    for name, (lo, hi) in config.bands.items():
        print(f"  {name}: {lo}-{hi} Hz")

    warnings = []
    for net in bundle.networks:
        if len(net.roi_ids) < 2:
            warnings.append(f"Network '{net.name}' has fewer than 2 ROIs; connectivity is undefined")
    if args.sfreq is not None:
        nyquist = args.sfreq / 2
        for name, (lo, hi) in config.bands.items():
            if lo > nyquist:
                warnings.append(f"Band '{name}' lies above Nyquist ({nyquist} Hz)")

    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for w in warnings:
            print(f"  - {w}")
        sys.exit(1)
    else:
        print("\nValidation passed.")


def cmd_list(args):
    """List registered reductions."""
    for title, registry in [("Power reductions", POWER_REDUCTIONS),
                            ("Connectivity reductions", CONNECTIVITY_REDUCTIONS)]:
        print(f"{title}:")
        for name in sorted(registry):
            doc = registry[name].__doc__
            print(f"  {name}: {doc.strip().splitlines()[0] if doc else 'No description'}")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="roi-network",
        description="ROI band power and network connectivity from source-projected EEG",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run
    p_run = subparsers.add_parser("run", help="Run the analysis on one recording")
    p_run.add_argument("--recording", required=True, type=Path, help="EEGLAB .set file")
    p_run.add_argument("--network-file", required=True, type=Path, help="LORETA network .mat file")
    p_run.add_argument("--config", type=Path, help="YAML options file")
    p_run.add_argument("--output", required=True, type=Path, help="Output directory")
    p_run.add_argument("--figures", action="store_true", help="Also write figures")
    p_run.set_defaults(func=cmd_run)

    # validate
    p_val = subparsers.add_parser("validate", help="Validate network file and config")
    p_val.add_argument("--network-file", required=True, type=Path, help="LORETA network .mat file")
    p_val.add_argument("--config", type=Path, help="YAML options file")
    p_val.add_argument("--sfreq", type=float, help="Sampling rate for nfft/band checks")
    p_val.set_defaults(func=cmd_validate)

    # list
    p_list = subparsers.add_parser("list", help="List registered reductions")
    p_list.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
