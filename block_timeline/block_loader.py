from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
from numbers import Real
import json

from .references import ReferenceSyntaxError, parse_reference, resolve_reference
from .utility import _logger

# -----------------------------------------------------------------------------
# Block data model & validation
# -----------------------------------------------------------------------------
@dataclass(eq=False)
class Block:
    title: str
    start: float
    end: float
    callback: Optional[Callable[..., Any]] = None   # None when the reference did not resolve
    args: Tuple[Any, ...] = ()
    active: bool = field(default=False, repr=False)

    @property
    def resolved(self) -> bool:
        return self.callback is not None

    def contains(self, position: float) -> bool:
        return self.start <= position <= self.end

    def summary(self) -> Dict[str, Any]:
        return {"title": self.title, "start": self.start, "end": self.end}

class BlockValidationError(Exception):
    pass

BlockDefinition = Union[Mapping[str, Any], Block]

DEFAULT_BLOCK_TITLE = "draw"

class BlockLoader:
    """Normalizes block definitions into :class:`Block` objects.

    A definition is a mapping with ``start`` and optional ``end`` plus one of:
    * ``func``: a callable, or a textual reference ``name`` / ``name(args)``
    * ``title``: a textual reference (the form sent by the timeline editor)

    An explicit ``args`` list overrides arguments parsed from the text.
    References are resolved against ``functions``; a reference that cannot be
    resolved leaves the block without callback and is reported through
    ``on_missing`` instead of raising.
    """

    def __init__(
        self,
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
        default_span: float = 100,
        on_missing: Optional[Callable[[str], None]] = None,
    ):
        self.functions: Mapping[str, Callable[..., Any]] = functions if functions is not None else {}
        self.default_span = default_span
        self._on_missing = on_missing

    def load(self, definitions: Sequence[BlockDefinition]) -> List[Block]:
        if isinstance(definitions, (str, bytes)) or not isinstance(definitions, Sequence):
            raise BlockValidationError("Block definitions must be a list of objects.")
        blocks = [self._parse_block_obj(obj, idx) for idx, obj in enumerate(definitions)]
        self._fill_default_ends(blocks)
        return blocks

    def load_file(self, path: str) -> List[Block]:
        return self.load(self.read_file(path))

    @staticmethod
    def read_file(path: str) -> List[Any]:
        """Raw block definitions from a JSON file (a list, or an object with ``blocks``)."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:  # rethrow with context
            raise BlockValidationError(f"Block JSON not found: {path}") from e
        except json.JSONDecodeError as e:
            raise BlockValidationError(f"Invalid JSON in {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("blocks", [data])
        return data

    def parse_sync(self, payload: Union[str, bytes, Sequence[Mapping[str, Any]]]) -> List[Block]:
        """Decode a ``syncTimeline`` payload (JSON text or decoded list)."""
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise BlockValidationError(f"Invalid timeline JSON: {e}") from e
        return self.load(payload)

    def default_block(self) -> Block:
        """Single block spanning the whole run, bound to ``draw`` when available."""
        func = self.functions.get(DEFAULT_BLOCK_TITLE)
        return Block(
            title=DEFAULT_BLOCK_TITLE,
            start=0,
            end=self.default_span,
            callback=func if callable(func) else None,
        )

    # -- internal ------------------------------------------------------------------
    def _parse_block_obj(self, obj: BlockDefinition, idx: int) -> Block:
        if isinstance(obj, Block):
            return Block(obj.title, obj.start, obj.end, obj.callback, tuple(obj.args))
        if not isinstance(obj, Mapping):
            raise BlockValidationError(f"Block #{idx}: must be an object, got {type(obj).__name__}.")

        start = self._number(obj.get("start"), idx, "start")
        end = obj.get("end")
        if end is not None:
            end = self._number(end, idx, "end")
            if end < start:
                raise BlockValidationError(f"Block #{idx}: end {end} is before start {start}.")

        func = obj.get("func", obj.get("title"))
        if func is None:
            raise BlockValidationError(f"Block #{idx}: needs 'func' or 'title'.")

        explicit_args = obj.get("args")
        if explicit_args is not None and (
            isinstance(explicit_args, (str, bytes)) or not isinstance(explicit_args, Sequence)
        ):
            raise BlockValidationError(f"Block #{idx}: 'args' must be a list.")

        if callable(func):
            title = str(obj.get("title") or getattr(func, "__name__", f"block_{idx}"))
            args = tuple(explicit_args or ())
            return Block(title=title, start=start, end=end, callback=func, args=args)

        if not isinstance(func, str):
            raise BlockValidationError(f"Block #{idx}: 'func' must be callable or text.")
        callback, parsed_args = self._resolve_text(func)
        args = tuple(explicit_args) if explicit_args is not None else parsed_args
        return Block(title=func, start=start, end=end, callback=callback, args=args)

    def _resolve_text(self, text: str) -> Tuple[Optional[Callable[..., Any]], Tuple[Any, ...]]:
        try:
            ref = parse_reference(text)
        except ReferenceSyntaxError as e:
            _logger.warning("Block '%s' is not a valid reference: %s", text, e)
            self._report_missing(text)
            return None, ()
        callback = resolve_reference(ref, self.functions)
        if callback is None:
            _logger.warning("Function '%s' for block '%s' not found.", ref.name, text)
            self._report_missing(text)
        return callback, ref.args

    def _report_missing(self, title: str) -> None:
        if self._on_missing is not None:
            self._on_missing(title)

    def _fill_default_ends(self, blocks: List[Block]) -> None:
        # end of an open block = next declared start - 1; the terminal block gets default_span
        for i, block in enumerate(blocks):
            if block.end is not None:
                continue
            if i < len(blocks) - 1:
                block.end = max(block.start, blocks[i + 1].start - 1)
            else:
                block.end = block.start + self.default_span

    @staticmethod
    def _number(value: Any, idx: int, label: str) -> float:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise BlockValidationError(f"Block #{idx}: '{label}' must be a number, got {value!r}.")
        return value
