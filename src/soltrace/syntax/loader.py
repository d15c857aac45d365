"""Read Solidity sources (or AST dumps) into a forest of typed syntax trees."""

from __future__ import annotations

import importlib
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from soltrace.errors import EmptyInputError, SourceLoadError
from soltrace.syntax.convert import convert_source_unit
from soltrace.syntax.nodes import SourceUnit

log = logging.getLogger(__name__)

type ParseFn = Callable[[str], Mapping[str, Any]]

AST_DUMP_SUFFIX = ".json"


def parse_solidity(source: str) -> Mapping[str, Any]:
    """
    Parse Solidity source text with the ``solidity-parser`` package.

    Returns
    -------
    Mapping[str, Any]
        Raw ``SourceUnit`` mapping in the solidity-parser-antlr shape.

    Raises
    ------
    RuntimeError
        If the parser package is not installed.
    """
    try:
        parser = importlib.import_module("solidity_parser.parser")
    except ImportError as exc:  # pragma: no cover - environment dependent
        message = "Parsing .sol files requires the solidity-parser package."
        raise RuntimeError(message) from exc
    return parser.parse(source, loc=False)


def _read_raw(path: Path, parse: ParseFn) -> Mapping[str, Any] | None:
    try:
        text = path.read_text(encoding="utf-8")
    except IsADirectoryError:
        log.warning("Skipping directory %s", path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceLoadError(str(path), str(exc)) from exc

    if path.suffix == AST_DUMP_SUFFIX:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceLoadError(str(path), f"invalid AST dump: {exc}") from exc
    try:
        return parse(text)
    except RuntimeError:
        raise
    except Exception as exc:  # noqa: BLE001 - parser failures are reported uniformly
        raise SourceLoadError(str(path), f"parse error: {exc}") from exc


def _is_relative_import(import_path: str) -> bool:
    return import_path.startswith(("./", "../"))


class ForestLoader:
    """Load files once each, following the relative imports of every listed file."""

    def __init__(self, parse: ParseFn | None = None) -> None:
        self._parse = parse or parse_solidity
        self._units: dict[Path, SourceUnit] = {}
        self._followed: set[Path] = set()
        self.forest: list[SourceUnit] = []

    def load(self, path: Path) -> SourceUnit | None:
        """
        Load a single file, reusing the unit when it was already loaded.

        Returns
        -------
        SourceUnit | None
            The converted unit, or None for directories.
        """
        key = path.resolve()
        if key in self._units:
            log.debug("Already loaded %s", path)
            return self._units[key]
        raw = _read_raw(path, self._parse)
        if raw is None:
            return None
        unit = convert_source_unit(raw, path=str(path))
        self._units[key] = unit
        self.forest.append(unit)
        return unit

    def load_with_imports(self, path: Path) -> None:
        """
        Load ``path`` and the files its relative imports name.

        Imports are followed for every listed file, including one that was
        already pulled in as another file's import; imported files do not have
        their own imports followed.
        """
        unit = self.load(path)
        key = path.resolve()
        if unit is None or key in self._followed:
            return
        self._followed.add(key)
        for directive in unit.imports():
            if not _is_relative_import(directive.path):
                log.debug("Not following non-relative import %s in %s", directive.path, path)
                continue
            imported = path.parent / directive.path
            log.info("Following import %s from %s", imported, path)
            self.load(imported)


def load_forest(paths: Iterable[str | Path], *, parse: ParseFn | None = None) -> list[SourceUnit]:
    """
    Build the AST forest for the given files.

    Parameters
    ----------
    paths : Iterable[str | Path]
        Files to analyze; directories are skipped.
    parse : ParseFn | None, optional
        Source parser; defaults to :func:`parse_solidity`.

    Returns
    -------
    list[SourceUnit]
        One unit per loaded file: each file followed by its imports.

    Raises
    ------
    EmptyInputError
        If no paths are given.
    """
    path_list = [Path(p) for p in paths]
    if not path_list:
        raise EmptyInputError()
    loader = ForestLoader(parse)
    for path in path_list:
        loader.load_with_imports(path)
    log.info("Loaded %d source units from %d paths", len(loader.forest), len(path_list))
    return loader.forest


__all__ = ["AST_DUMP_SUFFIX", "ForestLoader", "ParseFn", "load_forest", "parse_solidity"]
