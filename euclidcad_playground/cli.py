"""Command line interface for EuclidCAD boards."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .board import Board
from .constructions import list_constructions
from .elements import elements_from_json, elements_to_json
from .intersect2d import find_all_intersections


def _ensure_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _emit(payload: Any, output: str | None) -> None:
    text = json.dumps(payload, indent=2)
    if output is None:
        print(text)
        return
    path = Path(output)
    _ensure_dir(path)
    path.write_text(text + "\n", encoding="utf-8")
    print(f"Wrote {path}")


def _read_elements(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, dict) and "elements" in data:
        data = data["elements"]
    if not isinstance(data, list):
        raise ValueError("Element file must contain a list of elements.")
    return data


def _cmd_list_constructions(_args: argparse.Namespace) -> None:
    print("Available constructions:")
    for item in list_constructions():
        print(f"  - {item.id}: {item.name} ({item.difficulty.value})")


def _cmd_construct(args: argparse.Namespace) -> None:
    board = Board()
    board.load_construction(args.name, width=args.width, height=args.height)
    snap = board.snapshot()
    payload = {
        "construction": args.name,
        "elements": elements_to_json(snap.elements),
        "intersections": [info.to_json() for info in snap.intersections],
    }
    _emit(payload, args.output)


def _cmd_intersections(args: argparse.Namespace) -> None:
    elements = elements_from_json(_read_elements(Path(args.path)))
    found = find_all_intersections(element for element in elements if not element.hidden)
    _emit([info.to_json() for info in found], args.output)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="euclidcad",
        description="EuclidCAD command line interface",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list-constructions", help="List classical constructions")
    list_parser.set_defaults(func=_cmd_list_constructions)

    construct = sub.add_parser("construct", help="Build a construction and print its elements as JSON")
    construct.add_argument("name", help="Construction id, see list-constructions")
    construct.add_argument("--width", type=float, default=700.0, help="Canvas width used for sizing")
    construct.add_argument("--height", type=float, default=500.0, help="Canvas height used for sizing")
    construct.add_argument("--output", help="Output JSON path")
    construct.set_defaults(func=_cmd_construct)

    inter = sub.add_parser("intersections", help="Report intersections of an element JSON file")
    inter.add_argument("path", help="JSON file with a list of elements")
    inter.add_argument("--output", help="Output JSON path")
    inter.set_defaults(func=_cmd_intersections)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(None if argv is None else list(argv))
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except (KeyError, ValueError, OSError) as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
