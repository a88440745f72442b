"""Module/code-unit resolution for one resolution session.

Fallback chain for a ModuleRecord:
1. Import by simple name (stdlib, installed packages, anything on sys.path).
2. Look the name up in an index of the profiled application's directory and
   load the indexed file by path.
3. Load from the path recorded in the module log, unless step 2 already
   tried that exact path.

Both caches store failures as well as successes, so each name and each path
gets at most one load attempt per session.
"""

from __future__ import annotations

import contextlib
import importlib
import importlib.util
import inspect
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType, TracebackType

import structlog

from jitlog.config.models import ResolutionConfig
from jitlog.core.errors import JitLogError, LogInputError, ResolutionError
from jitlog.logs.models import ModuleRecord
from jitlog.runtime.metadata import MetadataTable

log = structlog.get_logger(__name__)


@dataclass(slots=True)
class CodeUnitIndex:
    """Simple module name -> file path, for the top level of one directory."""

    directory: Path
    entries: dict[str, Path] = field(default_factory=dict)
    errors: list[JitLogError] = field(default_factory=list)

    @classmethod
    def build(cls, directory: Path) -> CodeUnitIndex:
        """Enumerate module files and packages directly inside ``directory``.

        Files that are not modules are skipped silently. Entries that cannot be
        inspected are collected in ``errors``.
        """
        index = cls(directory=directory)
        if not directory.is_dir():
            index.errors.append(LogInputError.app_directory_not_found(str(directory)))
            return index

        for entry in sorted(directory.iterdir()):
            try:
                found = _module_entry(entry)
            except OSError as e:
                index.errors.append(
                    LogInputError.directory_entry_unreadable(
                        str(entry), f"{type(e).__name__} - {e}"
                    )
                )
                continue
            if found is None:
                continue
            name, path = found
            # Source wins over bytecode and extension builds of the same name
            if name not in index.entries or path.suffix == ".py":
                index.entries[name] = path

        log.debug("modules.indexed", directory=str(directory), count=len(index.entries))
        return index

    def get(self, name: str) -> Path | None:
        return self.entries.get(name)


def _module_entry(entry: Path) -> tuple[str, Path] | None:
    if entry.is_dir():
        init = entry / "__init__.py"
        if init.is_file() and entry.name.isidentifier():
            return entry.name, init
        return None
    if not entry.is_file():
        return None
    name = inspect.getmodulename(entry.name)
    if name is None or not name.isidentifier():
        return None
    return name, entry


@contextlib.contextmanager
def _prepend_sys_path(directory: Path) -> Iterator[None]:
    entry = str(directory)
    added = entry not in sys.path
    if added:
        sys.path.insert(0, entry)
    try:
        yield
    finally:
        if added:
            with contextlib.suppress(ValueError):
                sys.path.remove(entry)


class ResolutionSession:
    """Owns loaded code units and load caches for one parse run.

    Use as a context manager; ``close()`` unregisters every module this
    session loaded from the application directory.

    Usage::

        with ResolutionSession(app_dir) as session:
            module = session.load(record)
    """

    def __init__(self, app_dir: Path, config: ResolutionConfig | None = None) -> None:
        self._config = config or ResolutionConfig()
        self.app_dir = app_dir.resolve()
        self.diagnostics: list[JitLogError] = []
        self._index: CodeUnitIndex | None = None
        self._by_name: dict[str, ModuleType | None] = {}
        self._by_path: dict[str, ModuleType | None] = {}
        self._by_module_id: dict[int, ModuleType] = {}
        self._tables: dict[str, MetadataTable] = {}
        self._preexisting: set[str] = set(sys.modules)
        self._registered: set[str] = set()
        self._closed = False

    def __enter__(self) -> ResolutionSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def index(self) -> CodeUnitIndex:
        """Directory index, built on first use."""
        if self._index is None:
            self._index = CodeUnitIndex.build(self.app_dir)
            self.diagnostics.extend(self._index.errors)
        return self._index

    def load(self, record: ModuleRecord) -> ModuleType:
        """Loaded code unit for a module record.

        Raises:
            ResolutionError: If no strategy can load it.
        """
        cached = self._by_module_id.get(record.module_id)
        if cached is not None:
            return cached

        module = self._load_by_name(record.assembly_name)

        tried: str | None = None
        if module is None and self._config.index_app_directory:
            indexed = self.index.get(record.assembly_name)
            if indexed is not None:
                tried = _normalize(str(indexed))
                module = self._load_by_path(indexed, record.assembly_name)

        if module is None and record.module_path and _normalize(record.module_path) != tried:
            module = self._load_by_path(Path(record.module_path), record.assembly_name)

        if module is None:
            raise ResolutionError.code_unit_load_failed(record.assembly_name, record.module_path)

        self._by_module_id[record.module_id] = module
        return module

    def metadata(self, module: ModuleType) -> MetadataTable:
        """Token tables of a loaded code unit, built once per session."""
        table = self._tables.get(module.__name__)
        if table is None or table.code_unit is not module:
            table = MetadataTable.build(module)
            self._tables[module.__name__] = table
        return table

    def _load_by_name(self, name: str) -> ModuleType | None:
        if name in self._by_name:
            return self._by_name[name]
        module: ModuleType | None
        try:
            module = importlib.import_module(name)
        except ImportError:
            module = None
        except Exception:
            # Importing runs arbitrary module code; any failure means "not by name"
            log.debug("modules.import_failed", name=name, exc_info=True)
            module = None
        self._by_name[name] = module
        if module is not None:
            log.debug("modules.loaded", name=name, strategy="name")
        return module

    def _load_by_path(self, path: Path, name: str) -> ModuleType | None:
        key = _normalize(str(path))
        if key in self._by_path:
            return self._by_path[key]

        module = self._exec_from_path(Path(key), name)
        self._by_path[key] = module
        if module is not None:
            self._by_name[name] = module
            log.debug("modules.loaded", name=name, strategy="path", path=key)
        return module

    def _exec_from_path(self, path: Path, name: str) -> ModuleType | None:
        if not path.is_file():
            return None
        existing = sys.modules.get(name)
        origin = getattr(existing, "__file__", None) or ""
        if existing is not None and _normalize(origin) == str(path):
            return existing

        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            return None
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        self._registered.add(name)
        try:
            with _prepend_sys_path(self.app_dir):
                spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(name, None)
            self._registered.discard(name)
            log.warning("modules.exec_failed", name=name, path=str(path), exc_info=True)
            return None
        return module

    def close(self) -> None:
        """Release loaded code units. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        for name in set(sys.modules) - self._preexisting:
            module = sys.modules.get(name)
            origin = getattr(module, "__file__", None)
            if name in self._registered or (origin and _is_within(Path(origin), self.app_dir)):
                del sys.modules[name]
        self._registered.clear()
        self._by_name.clear()
        self._by_path.clear()
        self._by_module_id.clear()
        self._tables.clear()
        log.debug("modules.session_closed", app_dir=str(self.app_dir))


def _normalize(path: str) -> str:
    return str(Path(path).resolve()) if path else ""


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory)
    except ValueError:
        return False
    return True
