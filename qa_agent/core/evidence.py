"""Evidence curation for raw stack traces.

This is the only code that sees the raw stack trace. It reduces it to a
small, deterministic ContextPack that is safe to hand to reasoning and
execution collaborators.
"""

import re

from .models import MAX_CONTEXT_CHARS, MAX_ERROR_CHARS, MAX_FRAMES, ContextPack

PLACEHOLDER_ERROR = "UnknownError: No error message found"

# Substrings identifying third-party or runtime-internal frames.
VENDOR_PATTERNS = (
    "node_modules",
    "internal/",
    "node:internal",
    "next/dist",
    "webpack",
    "core-js",
    "regenerator-runtime",
)

_LINE_SPLIT = re.compile(r"\r?\n")
_SOURCE_FILE = re.compile(r"(/[^:()]+?\.(?:tsx?|jsx?))(?!\w)")


class EvidenceCurator:
    """Builds context packs from raw stack traces.

    No external dependencies, no I/O, no randomness: the same input always
    yields the same ContextPack. All methods are static as the class
    carries no state.
    """

    @staticmethod
    def curate(raw: str) -> ContextPack:
        """Reduce a raw stack trace to a budget-bounded ContextPack.

        Never raises; malformed or empty input degrades to fallbacks.
        """
        lines = _LINE_SPLIT.split(raw)

        error = EvidenceCurator.extract_error_message(lines)
        frames = EvidenceCurator.extract_frames(lines)
        suspected_file = EvidenceCurator.guess_suspected_file(frames)

        return EvidenceCurator.enforce_budget(
            ContextPack(error=error, top_frames=frames, suspected_file=suspected_file)
        )

    @staticmethod
    def extract_error_message(lines: list[str]) -> str:
        """First non-empty line mentioning "error", else first non-empty line."""
        first_non_empty: str | None = None
        for line in lines:
            trimmed = line.strip()
            if not trimmed:
                continue
            if first_non_empty is None:
                first_non_empty = trimmed
            if "error" in trimmed.lower():
                return trimmed[:MAX_ERROR_CHARS]

        if first_non_empty is None:
            return PLACEHOLDER_ERROR
        return first_non_empty[:MAX_ERROR_CHARS]

    @staticmethod
    def is_vendor_frame(frame: str) -> bool:
        return any(pattern in frame for pattern in VENDOR_PATTERNS)

    @staticmethod
    def extract_frames(lines: list[str]) -> tuple[str, ...]:
        """Collect ``at ...`` frames, preferring application code over vendor code."""
        raw_frames = [line.strip() for line in lines if line.strip().startswith("at ")]
        own_frames = [f for f in raw_frames if not EvidenceCurator.is_vendor_frame(f)]

        frames = own_frames if own_frames else raw_frames
        return tuple(frames[:MAX_FRAMES])

    @staticmethod
    def guess_suspected_file(frames: tuple[str, ...]) -> str | None:
        """Return the first JS/TS source path found in the frames, in order."""
        for frame in frames:
            match = _SOURCE_FILE.search(frame)
            if match:
                return match.group(1)
        return None

    @staticmethod
    def enforce_budget(context: ContextPack) -> ContextPack:
        """Shrink a context pack until its serialized form fits the budget.

        Frames are kept as the longest prefix that fits. If even no frames
        do not fit, the suspected file is dropped and finally the error
        message is shortened from the end.
        """
        if len(context.serialize()) <= MAX_CONTEXT_CHARS:
            return context

        kept: list[str] = []
        for frame in context.top_frames:
            candidate = ContextPack(
                error=context.error,
                top_frames=(*kept, frame),
                suspected_file=context.suspected_file,
            )
            if len(candidate.serialize()) > MAX_CONTEXT_CHARS:
                break
            kept.append(frame)

        trimmed = ContextPack(
            error=context.error,
            top_frames=tuple(kept),
            suspected_file=context.suspected_file,
        )
        if len(trimmed.serialize()) <= MAX_CONTEXT_CHARS:
            return trimmed

        # Zero frames still too large: only pathological inputs get here.
        trimmed = ContextPack(error=context.error, top_frames=(), suspected_file=None)
        error = context.error
        while error and len(trimmed.serialize()) > MAX_CONTEXT_CHARS:
            error = error[:-1]
            trimmed = ContextPack(error=error, top_frames=(), suspected_file=None)
        return trimmed


def curate(raw: str) -> ContextPack:
    """Module-level shortcut for EvidenceCurator.curate()."""
    return EvidenceCurator.curate(raw)
