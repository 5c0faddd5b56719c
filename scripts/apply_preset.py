#!/usr/bin/env python3
"""Drive presets against a running Chromium over the remote-debugging port.

Usage
-----
Start Chromium with ``--remote-debugging-port=9222`` and run::

    python scripts/apply_preset.py tabs
    python scripts/apply_preset.py --presets presets.json apply p1
    python scripts/apply_preset.py --presets presets.json verify p1 --json
    python scripts/apply_preset.py --presets presets.json remove p1 --active p2

Options::

    --presets FILE       Exported preset list (JSON array or {"presets": [...]})
    --tab ID             Target id of the tab (default: first page target)
    --endpoint URL       Remote-debugging endpoint (default: PYPRESET_CDP_ENDPOINT)
    --active ID          Preset already active on the tab (repeatable)
    --restore-shared     Re-apply values of presets still sharing a parameter
    --json               Output machine-readable JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pypreset import (  # noqa: E402
    CdpBrowser,
    InMemoryPresetRepository,
    PresetError,
    PresetSynchronizer,
    SyncConfig,
)

_PRESET_COMMANDS = ("apply", "remove", "verify", "sync")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply, remove or verify parameter presets on a browser tab.")
    parser.add_argument("command", choices=("tabs", *_PRESET_COMMANDS))
    parser.add_argument("preset_id", nargs="?", help="Preset id (required except for 'tabs')")
    parser.add_argument("--presets", type=Path, help="Exported preset list")
    parser.add_argument("--tab", help="Target id of the tab (default: first page target)")
    parser.add_argument("--endpoint", help="Remote-debugging endpoint, e.g. http://127.0.0.1:9222")
    parser.add_argument("--active", action="append", default=[], help="Preset already active on the tab")
    parser.add_argument("--restore-shared", action="store_true", help="Restore values of --active presets")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.command in _PRESET_COMMANDS and (args.preset_id is None or args.presets is None):
        parser.error(f"'{args.command}' needs a preset id and --presets FILE")
    return args


def _build_config(args: argparse.Namespace) -> SyncConfig:
    overrides: dict[str, Any] = {}
    if args.endpoint:
        overrides["cdp_endpoint"] = args.endpoint
    if args.restore_shared:
        overrides["restore_shared_values"] = True
    return SyncConfig.from_env(**overrides)


def _emit(payload: Any, *, json_mode: bool, lines: list[str]) -> None:
    if json_mode:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print("\n".join(lines))


async def _run(args: argparse.Namespace) -> int:
    config = _build_config(args)

    async with CdpBrowser(config) as browser:
        tabs = await browser.tabs.list()

        if args.command == "tabs":
            _emit(
                [tab.model_dump() for tab in tabs],
                json_mode=args.json_mode,
                lines=[f"{tab.id}  {tab.title or '-'}  {tab.url or '-'}" for tab in tabs] or ["No page targets."],
            )
            return 0

        try:
            text = args.presets.read_text(encoding="utf-8")
        except OSError as exc:
            raise PresetError(f"Cannot read {args.presets}: {exc}") from exc
        repository = InMemoryPresetRepository.from_json(text)
        preset = await repository.require_preset(args.preset_id)

        if args.tab:
            tab_id = args.tab
        elif tabs:
            tab_id = str(tabs[0].id)
        else:
            print("No page targets.", file=sys.stderr)
            return 2

        for active_id in args.active:
            await repository.add_active_preset_to_tab(tab_id, active_id)

        sync = PresetSynchronizer(
            tabs=browser.tabs,
            cookies=browser.cookies,
            scripts=browser.scripts,
            repository=repository,
            config=config,
        )

        if args.command == "apply":
            ok = await sync.apply_preset(tab_id, preset.id)
            _emit({"ok": ok}, json_mode=args.json_mode, lines=[f"apply {preset.name}: {'ok' if ok else 'FAILED'}"])
            return 0 if ok else 1

        if args.command == "remove":
            ok = await sync.remove_preset(tab_id, preset.id)
            _emit({"ok": ok}, json_mode=args.json_mode, lines=[f"remove {preset.name}: {'ok' if ok else 'FAILED'}"])
            return 0 if ok else 1

        if args.command == "verify":
            verification = await sync.verify_preset(tab_id, preset.id)
            lines = [
                f"  [{'ok' if r.verified else '!!'}] {r.parameter.type.label:<16} {r.parameter.key}"
                for r in verification.results
            ]
            lines.append(f"verify {preset.name}: {'ok' if verification.all_verified else 'MISMATCH'}")
            _emit(verification.model_dump(mode="json"), json_mode=args.json_mode, lines=lines)
            return 0 if verification.all_verified else 1

        outcomes = [(parameter, await sync.sync_parameter(tab_id, parameter)) for parameter in preset.parameters]
        _emit(
            [{"key": p.key, "type": p.type.value, "ok": ok} for p, ok in outcomes],
            json_mode=args.json_mode,
            lines=[f"  [{'ok' if ok else '!!'}] {p.type.label:<16} {p.key}" for p, ok in outcomes],
        )
        return 0 if all(ok for _, ok in outcomes) else 1


def main() -> int:
    args = _parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)
    try:
        return asyncio.run(_run(args))
    except PresetError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
