from __future__ import annotations

import argparse
import sys

from .core.project_store import ProjectStore
from .services.loader import ImmediateLoader
from .services.recent_projects import RecentProjects


def _open_store(path: str) -> ProjectStore | None:
    """Load ``path`` synchronously; print the failure and return None on error."""

    store = ProjectStore(loader=ImmediateLoader(), recent_projects=RecentProjects())
    failures: list[str] = []
    store.load_failed.connect(lambda _path, message: failures.append(message))
    store.load_project(path)
    if failures:
        print(failures[0], file=sys.stderr)
        return None
    return store


def cmd_info(args: argparse.Namespace) -> int:
    store = _open_store(args.path)
    if store is None:
        return 1
    reference = store.reference_track
    rows = ([("reference", reference)] if reference is not None else []) + [
        ("track", track) for track in store.tracks
    ]
    print(f"{'role':<10} {'track':<10} {'series':<10} {'start':>10} {'end':>10}  source")
    for role, track in rows:
        for series in track.aligned_time_series:
            print(
                f"{role:<10} {track.id:<10} {series.id:<10} "
                f"{series.reference_start:>10.3f} {series.reference_end:>10.3f}  {series.source}"
            )
    labeling = store.labeling_store
    print(f"{len(labeling.labels)} labels, classes: {', '.join(labeling.classes)}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    store = _open_store(args.path)
    if store is None:
        return 1
    for path in store.export_labels(args.output):
        print(f"Wrote {path}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("annotrack")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("info", help="list the tracks of a project")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("export", help="write labelled copies of the sensor files")
    sp.add_argument("path")
    sp.add_argument("output")
    sp.set_defaults(func=cmd_export)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
