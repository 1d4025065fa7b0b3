"""In-memory registry of discovered candidates.

The registry is keyed by path and remembers discovery order for
display. Aggregate statistics are maintained incrementally on every
mutation so the terminal UI can show them on each frame for free.

The registry is not thread-safe: a single thread (the interaction
controller) must own every read and write.
"""

from dataclasses import dataclass
from enum import Enum

from ggufclean.scanning.models import Candidate, CandidateStatus


class SortKey(str, Enum):
    """Display order of the visible list.

    Attributes:
        DISCOVERY: Order in which candidates were added.
        SIZE: Largest first.
        PATH: Alphabetical by path.
    """

    DISCOVERY = "discovery"
    SIZE = "size"
    PATH = "path"

    def next(self) -> "SortKey":
        """Return the following sort key, wrapping around."""
        members = list(SortKey)
        return members[(members.index(self) + 1) % len(members)]


@dataclass(frozen=True, slots=True)
class RegistryStats:
    """Aggregate statistics over the visible candidates.

    Attributes:
        total_count: Candidates still on disk (pending or failed).
        total_reclaimable_bytes: Combined size of those candidates.
        selected_count: Candidates marked for deletion.
        selected_bytes: Combined size of the marked candidates.
    """

    total_count: int = 0
    total_reclaimable_bytes: int = 0
    selected_count: int = 0
    selected_bytes: int = 0


class CandidateRegistry:
    """Mutable collection of candidates with derived aggregates.

    Operations on unknown paths are silent no-ops so stale references
    held by the UI can never crash it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Candidate] = {}
        self._sort_key = SortKey.DISCOVERY
        self._view: list[Candidate] | None = None
        self._total_count = 0
        self._total_bytes = 0
        self._selected_count = 0
        self._selected_bytes = 0

    def __len__(self) -> int:
        return self._total_count

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def stats(self) -> RegistryStats:
        """Current aggregate statistics."""
        return RegistryStats(
            total_count=self._total_count,
            total_reclaimable_bytes=self._total_bytes,
            selected_count=self._selected_count,
            selected_bytes=self._selected_bytes,
        )

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def total_reclaimable_bytes(self) -> int:
        return self._total_bytes

    @property
    def selected_count(self) -> int:
        return self._selected_count

    @property
    def selected_bytes(self) -> int:
        return self._selected_bytes

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def visible(self) -> list[Candidate]:
        """Candidates still on disk, in display order."""
        if self._view is None:
            view = [c for c in self._entries.values() if c.is_visible]
            if self._sort_key == SortKey.SIZE:
                view.sort(key=lambda c: c.size_bytes, reverse=True)
            elif self._sort_key == SortKey.PATH:
                view.sort(key=lambda c: c.path)
            self._view = view
        return list(self._view)

    @property
    def selected_paths(self) -> list[str]:
        """Paths marked for deletion, in display order."""
        return [c.path for c in self.visible if c.selected]

    @property
    def deleted(self) -> list[Candidate]:
        """Candidates removed from storage, kept for the deletion summary."""
        return [c for c in self._entries.values() if c.status == CandidateStatus.DELETED]

    @property
    def failed(self) -> list[Candidate]:
        """Candidates whose deletion failed."""
        return [c for c in self._entries.values() if c.status == CandidateStatus.FAILED]

    def get(self, path: str) -> Candidate | None:
        """Look up a candidate by path."""
        return self._entries.get(path)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, candidate: Candidate) -> bool:
        """Add a newly discovered candidate.

        Args:
            candidate: Candidate to add.

        Returns:
            True if added, False if the path is already registered.
        """
        if candidate.path in self._entries:
            return False
        self._entries[candidate.path] = candidate
        if candidate.is_visible:
            self._count_in(candidate)
        self._view = None
        return True

    def toggle_selection(self, path: str) -> bool | None:
        """Flip the selection of a visible candidate.

        Args:
            path: Candidate path.

        Returns:
            The new selection state, or None if the path is unknown or deleted.
        """
        candidate = self._entries.get(path)
        if candidate is None or not candidate.is_visible:
            return None
        self._set_selected(candidate, not candidate.selected)
        return candidate.selected

    def select_all(self) -> None:
        """Select every visible candidate."""
        for candidate in self._entries.values():
            if candidate.is_visible:
                self._set_selected(candidate, True)

    def select_none(self) -> None:
        """Clear every selection."""
        for candidate in self._entries.values():
            if candidate.is_visible:
                self._set_selected(candidate, False)

    def mark_deleted(self, path: str) -> None:
        """Record that a candidate was removed from storage.

        The candidate leaves the visible list and the aggregates but is
        kept for the post-deletion summary.
        """
        candidate = self._entries.get(path)
        if candidate is None or not candidate.is_visible:
            return
        self._set_selected(candidate, False)
        self._count_out(candidate)
        candidate.status = CandidateStatus.DELETED
        candidate.failure_reason = None
        self._view = None

    def mark_failed(self, path: str, reason: str) -> None:
        """Record that deleting a candidate failed.

        The candidate stays visible with its reason and keeps its
        selection, so the aggregates only change for files actually removed.
        """
        candidate = self._entries.get(path)
        if candidate is None or not candidate.is_visible:
            return
        candidate.status = CandidateStatus.FAILED
        candidate.failure_reason = reason

    def remove(self, path: str) -> None:
        """Drop a candidate entirely."""
        candidate = self._entries.pop(path, None)
        if candidate is None:
            return
        if candidate.is_visible:
            self._set_selected(candidate, False)
            self._count_out(candidate)
        self._view = None

    def sort_by(self, key: SortKey) -> None:
        """Change the display order."""
        if key != self._sort_key:
            self._sort_key = key
            self._view = None

    # ------------------------------------------------------------------
    # Aggregate bookkeeping
    # ------------------------------------------------------------------

    def _set_selected(self, candidate: Candidate, selected: bool) -> None:
        if candidate.selected == selected:
            return
        candidate.selected = selected
        sign = 1 if selected else -1
        self._selected_count += sign
        self._selected_bytes += sign * candidate.size_bytes

    def _count_in(self, candidate: Candidate) -> None:
        self._total_count += 1
        self._total_bytes += candidate.size_bytes
        if candidate.selected:
            self._selected_count += 1
            self._selected_bytes += candidate.size_bytes

    def _count_out(self, candidate: Candidate) -> None:
        self._total_count -= 1
        self._total_bytes -= candidate.size_bytes
