"""Compiles raw head tuples into resolved heads plus hint ordering."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Sequence

from .colors import Color, ForeignKeys, head_color
from .models import Head, HeadDisplay, HeadOptions
from .validation import validate_heads

EXIT_HEAD = "<Esc>"


@dataclass(frozen=True, slots=True)
class HeadTable:
    """Ordered heads of one instance keyed by lhs."""

    heads: tuple[Head, ...]
    display: Mapping[str, HeadDisplay]
    synthetic_exit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "display", MappingProxyType(dict(self.display)))

    def __iter__(self) -> Iterator[Head]:
        return iter(self.heads)

    def __len__(self) -> int:
        return len(self.heads)

    def __contains__(self, lhs: object) -> bool:
        return any(head.lhs == lhs for head in self.heads)

    def get(self, lhs: str) -> Head:
        for head in self.heads:
            if head.lhs == lhs:
                return head
        raise KeyError(f"Head '{lhs}' is not defined")

    def ordered_display(self) -> list[tuple[Head, HeadDisplay]]:
        pairs = [(head, self.display[head.lhs]) for head in self.heads]
        return sorted(pairs, key=lambda pair: pair[1].index)

    @classmethod
    def compile(
        cls,
        raw_heads: Iterable[Sequence[object]],
        *,
        foreign_keys: ForeignKeys,
        exit: bool,
        color: Color,
    ) -> "HeadTable":
        raw = list(raw_heads)
        validate_heads(raw)

        heads: list[Head] = []
        display: dict[str, HeadDisplay] = {}
        has_exit_head = exit
        for index, entry in enumerate(raw, start=1):
            lhs = entry[0]
            action = entry[1] if len(entry) > 1 else None
            options = HeadOptions.from_mapping(
                lhs, entry[2] if len(entry) > 2 else None  # type: ignore[arg-type]
            )
            if options.exit is not None:
                effective = head_color(foreign_keys, options.exit)
                head_exit = options.exit
                has_exit_head = has_exit_head or options.exit
            else:
                effective = color
                head_exit = exit
            heads.append(
                Head(
                    lhs=lhs,  # type: ignore[arg-type]
                    action=action,  # type: ignore[arg-type]
                    options=options,
                    exit=head_exit,
                    color=effective,
                )
            )
            display[lhs] = HeadDisplay(  # type: ignore[index]
                index=index, color=effective.display_name, desc=options.desc
            )

        synthetic_exit = not has_exit_head and EXIT_HEAD not in display
        if synthetic_exit:
            exit_color = Color.TEAL if foreign_keys is ForeignKeys.WARN else Color.BLUE
            heads.append(
                Head(
                    lhs=EXIT_HEAD,
                    action=None,
                    options=HeadOptions(exit=True, desc="exit"),
                    exit=True,
                    color=exit_color,
                )
            )
            display[EXIT_HEAD] = HeadDisplay(
                index=len(heads), color=exit_color.display_name, desc="exit"
            )

        return cls(heads=tuple(heads), display=display, synthetic_exit=synthetic_exit)


__all__ = ["HeadTable", "EXIT_HEAD"]
