"""Transcript buffer entity — the shared growing text and its two progress cursors."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class TailClaim:
    """Dispatch-time bound of a refine call: the span ``[start, end)`` as it was when sent."""

    start: int
    end: int
    source: str
    epoch: int


@dataclass(frozen=True)
class TranslationSpan:
    """Dispatch-time bound of a translate call: ``[translated_upto, refined_upto)`` when sent."""

    start: int
    end: int
    source: str
    epoch: int


class TranscriptBuffer(BaseModel):
    """Append-mostly transcript text with ``translated_upto <= refined_upto <= len(text)``.

    Only mutated from the event loop thread. Writers that run across an await
    (refine, translate) capture a claim/span at dispatch time and hand it back
    on completion; ``epoch`` changes whenever already-captured text may have
    been rewritten (user edit, restore, reset), which voids those captures.
    """

    text: str = ''
    refined_upto: int = 0
    translated_upto: int = 0
    epoch: int = 0
    claimed_upto: int = 0

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def unrefined_length(self) -> int:
        return len(self.text) - self.refined_upto

    @property
    def has_claim(self) -> bool:
        return self.claimed_upto > 0

    @property
    def needs_paragraph_break(self) -> bool:
        return bool(self.text.strip()) and not self.text.endswith('\n')

    @property
    def cursors_consistent(self) -> bool:
        return 0 <= self.translated_upto <= self.refined_upto <= len(self.text)

    def read(self, start: int = 0, end: int | None = None) -> str:
        return self.text[start:end]

    def _trimmed(self) -> str:
        # Whitespace is only trimmed above text that is certified or out for refinement.
        floor = max(self.refined_upto, self.claimed_upto)
        return self.text[:floor] + self.text[floor:].rstrip()

    def append(self, text: str) -> None:
        self.text += text

    def append_fragments(self, fragments: list[str]) -> None:
        """Append each fragment on its own line, never producing a blank line."""
        if not fragments:
            return
        result = self._trimmed()
        for fragment in fragments:
            sep = '' if not result or result.endswith('\n') else '\n'
            result += sep + fragment
        self.text = result

    def commit_paragraph(self) -> bool:
        """Trim the tail and close it with a single line break. Returns True if the text changed."""
        base = self._trimmed()
        if not base.strip():
            return False
        new_text = base if base.endswith('\n') else base + '\n'
        changed = new_text != self.text
        self.text = new_text
        return changed

    # --- refine stage ---

    def claim_tail(self) -> TailClaim:
        """Capture the unrefined tail for a refine call."""
        end = len(self.text)
        claim = TailClaim(
            start=self.refined_upto,
            end=end,
            source=self.text[self.refined_upto : end],
            epoch=self.epoch,
        )
        self.claimed_upto = end
        return claim

    def release(self, claim: TailClaim) -> None:
        if claim.epoch == self.epoch:
            self.claimed_upto = 0

    def apply_refinement(self, claim: TailClaim, refined: str) -> bool:
        """Replace exactly the claimed span with *refined*; text appended since dispatch is kept.

        Advances ``refined_upto`` to the end of the replacement. Returns False
        (and changes nothing) if the claim is stale.
        """
        if claim.epoch != self.epoch or claim.start != self.refined_upto:
            return False
        if self.text[claim.start : claim.end] != claim.source:
            return False

        head = self.text[: claim.start]
        leading = claim.source[: len(claim.source) - len(claim.source.lstrip())]
        if not head or head.endswith('\n'):
            sep = ''
        elif '\n' in leading:
            sep = '\n'
        elif head[-1].isspace():
            sep = ''
        else:
            sep = ' '
        body = head + sep + refined
        self.text = body + self.text[claim.end :]
        self.refined_upto = len(body)
        self.claimed_upto = 0
        return True

    def certify_all(self) -> None:
        """Mark the whole buffer as refined as-is (end-of-session flush)."""
        if self.has_claim:
            raise RuntimeError('Cannot certify while a refine call is outstanding')
        self.refined_upto = len(self.text)

    # --- translate stage ---

    def translation_span(self) -> TranslationSpan:
        return TranslationSpan(
            start=self.translated_upto,
            end=self.refined_upto,
            source=self.text[self.translated_upto : self.refined_upto],
            epoch=self.epoch,
        )

    def advance_translated(self, span: TranslationSpan) -> bool:
        """Move ``translated_upto`` to the span end captured at dispatch, never past ``refined_upto``."""
        if span.epoch != self.epoch:
            return False
        if span.start != self.translated_upto or span.end > self.refined_upto:
            return False
        self.translated_upto = span.end
        return True

    # --- edits and resets: both cursors always move together ---

    def replace_text(self, new_text: str) -> None:
        """Apply a user edit. Cursors survive only over the unchanged common prefix."""
        old_text = self.text
        common = len(os.path.commonprefix([old_text, new_text]))
        self.text = new_text
        if common >= len(old_text):
            return  # pure append
        self.refined_upto = min(self.refined_upto, common)
        self.translated_upto = min(self.translated_upto, self.refined_upto)
        self.claimed_upto = 0
        self.epoch += 1

    def restore(self, text: str, refined_upto: int, translated_upto: int) -> None:
        self.text = text
        self.refined_upto = max(0, min(refined_upto, len(text)))
        self.translated_upto = max(0, min(translated_upto, self.refined_upto))
        self.claimed_upto = 0
        self.epoch += 1

    def reset(self) -> None:
        self.restore('', 0, 0)


class TranslationBuffer(BaseModel):
    """Output text of the translate stage. Never read back by the pipeline."""

    text: str = ''

    def append_paragraph(self, paragraph: str) -> None:
        base = self.text.rstrip()
        sep = '\n' if base else ''
        self.text = base + sep + paragraph

    def reset(self) -> None:
        self.text = ''
