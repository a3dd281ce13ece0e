"""Section store: named storage locations and their invariants.

Section names are unique ignoring case. Uniqueness is checked against the
latest local mirror; concurrent clients writing the same record store are
not coordinated (last write wins).
"""
from __future__ import annotations

from typing import Optional, Set, Tuple

from logic.errors import (
    DuplicateError,
    NotEmptyError,
    NotFoundError,
    PersistenceError,
    RenameCascadeError,
    ValidationError,
)
from logic.validation import parse_item_row, parse_section_row
from memory.inventory_state import InventoryState, RenameInconsistency
from models.section import Section
from tools.abandon import AbandonSignal, check_abandoned
from tools.notifications import Notifier
from tools.observability import instrument_operation
from tools.record_store import ITEMS_TABLE, SECTIONS_TABLE, RecordStore


class SectionStore:
    """Create, rename and delete sections; apply only confirmed results."""

    def __init__(
        self,
        state: InventoryState,
        record_store: RecordStore,
        notifier: Notifier,
        placeholder_image_url: str = "",
    ) -> None:
        self.state = state
        self.record_store = record_store
        self.notifier = notifier
        self.placeholder_image_url = placeholder_image_url

    def load(self) -> Tuple[Section, ...]:
        """Populate the mirror from the record store; failures leave it empty."""

        try:
            sections = [parse_section_row(row) for row in self.record_store.select(SECTIONS_TABLE)]
        except PersistenceError as exc:
            self.state.replace_sections([])
            self.notifier.report("error", "Could not load sections", exc.message)
            return ()
        self.state.replace_sections(sections)
        return self.state.sections()

    def list(self) -> Tuple[Section, ...]:
        return self.state.sections()

    def get(self, section_id: str) -> Section:
        section = self.state.get_section(section_id)
        if section is None:
            raise NotFoundError(f"No section with id {section_id}")
        return section

    def find_by_name(self, name: str) -> Optional[Section]:
        """Case-insensitive lookup; ``None`` when no section matches."""

        return self.state.find_section_by_name(name)

    def item_count(self, section_id: str) -> int:
        section = self.get(section_id)
        return len(self.state.items_in(section.name))

    def _clean_name(self, name: str | None, exclude_id: str | None = None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Section name cannot be blank")
        existing = self.state.find_section_by_name(cleaned, exclude_id=exclude_id)
        if existing is not None:
            raise DuplicateError(f"A section named '{existing.name}' already exists")
        return cleaned

    def _stale_names(self, section: Section) -> Set[str]:
        """Names items may still carry for ``section`` after a partial rename."""

        pending = self.state.inconsistency_for(section.id)
        return set(pending.old_names) if pending else set()

    @instrument_operation("sections.create")
    def create(self, name: str, abandon: AbandonSignal | None = None) -> Section:
        cleaned = self._clean_name(name)
        check_abandoned(abandon, "Adding a section")
        section = parse_section_row(self.record_store.insert(SECTIONS_TABLE, {"name": cleaned}))
        self.state.put_section(section)
        self.notifier.report("info", "Section added", f"'{section.name}' is ready for items")
        return section

    @instrument_operation("sections.rename")
    def rename(self, section_id: str, new_name: str, abandon: AbandonSignal | None = None) -> Section:
        """Rename a section and move every item that referenced the old name.

        The section row is updated first, then each item individually. When
        some item updates fail the section keeps its new name, the failures
        are recorded as a :class:`RenameInconsistency` and
        :class:`RenameCascadeError` is raised; :meth:`repair` retries them.
        The abandon signal only stops a rename before the section row is
        written; after that the cascade always runs.
        """

        section = self.get(section_id)
        cleaned = self._clean_name(new_name, exclude_id=section.id)
        if cleaned == section.name:
            return section

        check_abandoned(abandon, "Renaming a section")
        renamed = parse_section_row(
            self.record_store.update(SECTIONS_TABLE, section.id, {"name": cleaned})
        )
        self.state.put_section(renamed)
        stale = self._stale_names(section) | {section.name}
        stale.discard(renamed.name)
        self._cascade(renamed, stale)
        self.notifier.report(
            "info", "Section renamed", f"'{section.name}' is now '{renamed.name}'"
        )
        return renamed

    @instrument_operation("sections.repair")
    def repair(self, section_id: str) -> Section:
        """Retry the item updates left over from a partially failed rename."""

        section = self.get(section_id)
        stale = self._stale_names(section)
        if not stale:
            return section
        self._cascade(section, stale)
        self.notifier.report("info", "Section repaired", f"All items now use '{section.name}'")
        return section

    def _cascade(self, section: Section, stale_names: Set[str]) -> None:
        failed = []
        last_error: PersistenceError | None = None
        for item in self.state.items():
            if item.location not in stale_names:
                continue
            try:
                row = self.record_store.update(ITEMS_TABLE, item.id, {"location": section.name})
                updated = parse_item_row(row, self.placeholder_image_url)
            except PersistenceError as exc:
                failed.append(item.id)
                last_error = exc
                continue
            self.state.put_item(updated)

        if not failed:
            self.state.clear_inconsistency(section.id)
            return

        remaining = {
            item.location
            for item in self.state.items()
            if item.id in failed
        }
        self.state.record_inconsistency(
            RenameInconsistency(
                section_id=section.id,
                old_names=tuple(sorted(remaining)),
                new_name=section.name,
                item_ids=tuple(failed),
            )
        )
        raise RenameCascadeError(
            f"'{section.name}' was renamed but {len(failed)} item(s) still point at the old "
            "name; retry the repair to finish moving them",
            section_id=section.id,
            failed_item_ids=failed,
            cause=last_error,
        )

    @instrument_operation("sections.delete")
    def delete(self, section_id: str, abandon: AbandonSignal | None = None) -> None:
        section = self.get(section_id)
        names = self._stale_names(section) | {section.name}
        count = sum(len(self.state.items_in(name)) for name in names)
        if count:
            raise NotEmptyError(
                f"'{section.name}' still holds {Section.describe_count(count).lower()}; "
                "move or delete them first",
                item_count=count,
            )
        check_abandoned(abandon, "Deleting a section")
        self.record_store.delete(SECTIONS_TABLE, section.id)
        self.state.remove_section(section.id)
        self.notifier.report("info", "Section deleted", f"'{section.name}' was removed")


__all__ = ["SectionStore"]
